"""Configuration management commands.

This module provides commands for managing course-cache configuration files.
"""

import click


@click.group()
def config():
    """Manage course-cache configuration files."""
    pass


@config.command(name="init")
@click.option(
    "--location",
    type=click.Choice(["user", "project"], case_sensitive=False),
    default="user",
    help="Where to create the configuration file.",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing configuration file.",
)
def config_init(location, force):
    """Create an example configuration file.

    By default, this creates a user-level config file at
    ~/.config/course-cache/config.toml (or platform equivalent).

    Use --location=project to create a project-level config file at
    .course-cache/config.toml in the current directory.

    Examples:
        course-cache config init
        course-cache config init --location=project
        course-cache config init --force
    """
    from course_cache.infrastructure.config import (
        get_config_file_locations,
        write_example_config,
    )

    locations = get_config_file_locations()
    config_path = locations[location.lower()]

    if config_path.exists() and not force:
        click.echo(f"Configuration file already exists at {config_path}\nUse --force to overwrite.")
        return

    try:
        created_path = write_example_config(location=location.lower())
    except PermissionError as e:
        raise click.ClickException(f"Permission denied creating config file: {e}") from e
    click.echo(f"Created configuration file: {created_path}")


@config.command(name="show")
@click.pass_context
def config_show(ctx):
    """Show the effective configuration values.

    Includes values from all sources (config files, environment variables
    and command-line options).
    """
    cfg = ctx.obj["CONFIG"]

    click.echo("Current course-cache Configuration:")
    click.echo("=" * 60)

    click.echo("\n[Paths]")
    click.echo(f"  cache_root: {cfg.paths.cache_root}")
    click.echo(f"  db_path: {cfg.paths.db_path}")

    click.echo("\n[Permissions]")
    click.echo(f"  chmod: {cfg.permissions.chmod or '(not set)'}")
    click.echo(f"  chgrp: {cfg.permissions.chgrp or '(not set)'}")

    click.echo("\n[Commands]")
    click.echo(f"  git_executable: {cfg.commands.git_executable}")
    timeout = cfg.commands.timeout
    click.echo(f"  timeout: {timeout if timeout is not None else '(no limit)'}")

    click.echo("\n[Database]")
    click.echo(f"  busy_timeout: {cfg.database.busy_timeout}")

    click.echo("\n[Logging]")
    click.echo(f"  log_level: {cfg.logging.log_level}")


@config.command(name="locate")
def config_locate():
    """Show configuration file locations and which of them exist."""
    from course_cache.infrastructure.config import find_config_files, get_config_file_locations

    locations = get_config_file_locations()
    existing = find_config_files()

    click.echo("Configuration File Locations:")
    click.echo("=" * 60)

    for location, label in (
        ("system", "System config (lowest priority)"),
        ("user", "User config"),
        ("project", "Project config (highest priority)"),
    ):
        click.echo(f"\n{label}:")
        click.echo(f"  Path: {existing[location] or locations[location]}")
        click.echo(f"  Status: {'Exists' if existing[location] else 'Not found'}")

    click.echo("\nPriority order (highest to lowest):")
    click.echo("  1. Command-line options")
    click.echo("  2. Environment variables")
    click.echo("  3. Project config (.course-cache/config.toml or course-cache.toml)")
    click.echo("  4. User config (~/.config/course-cache/config.toml)")
    click.echo("  5. System config (/etc/course-cache/config.toml)")
    click.echo("  6. Default values")
