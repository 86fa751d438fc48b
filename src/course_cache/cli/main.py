"""Command-line interface for course_cache.

This module provides the main CLI entry point. Commands are organized
into separate modules under course_cache.cli.commands.
"""

from pathlib import Path

import click

from course_cache import __version__
from course_cache.cli.commands.shared import LOG_LEVELS, setup_logging
from course_cache.infrastructure.config import CourseCacheConfig


@click.group()
@click.version_option(version=__version__, prog_name="course-cache")
@click.option(
    "--db-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the course database (overrides the configuration).",
)
@click.option(
    "--cache-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory below which course caches are stored (overrides the configuration).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (overrides the configuration).",
)
@click.option("--verbose", "-v", is_flag=True, help="Also log to the console.")
@click.pass_context
def cli(ctx, db_path, cache_root, log_level, verbose):
    """course-cache - Refresh exercise courses into a versioned local cache.

    Clones the source repository of a course, builds solution and stub
    trees for every exercise and packages the stubs as ZIP archives.
    """
    paths = {}
    if db_path is not None:
        paths["db_path"] = str(db_path)
    if cache_root is not None:
        paths["cache_root"] = str(cache_root)
    config = CourseCacheConfig(paths=paths) if paths else CourseCacheConfig()

    setup_logging(log_level or config.logging.log_level, console_logging=verbose)

    ctx.ensure_object(dict)
    ctx.obj["CONFIG"] = config


# These imports must come after cli is defined, hence noqa: E402
from course_cache.cli.commands.config import config  # noqa: E402
from course_cache.cli.commands.courses import course_group  # noqa: E402
from course_cache.cli.commands.refresh import refresh  # noqa: E402

cli.add_command(refresh)
cli.add_command(config)
cli.add_command(course_group)


if __name__ == "__main__":
    cli()
