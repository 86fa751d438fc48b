"""Refreshing a course cache from the command line."""

import click

from course_cache.cli.commands.shared import cli_console, get_config, get_store
from course_cache.core.report import RefreshFailure, Report
from course_cache.refresh.orchestrator import CourseRefresher


def print_report(report: Report) -> None:
    for warning in report.warnings:
        cli_console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)
    for error in report.errors:
        cli_console.print(f"[red]Error:[/red] {error}", highlight=False)


@click.command()
@click.argument("name")
@click.pass_context
def refresh(ctx, name):
    """Refresh course NAME from its source repository.

    Exits with status 1 if the refresh failed; the previous cache then
    remains in place.
    """
    store = get_store(ctx)
    course = store.find_course(name)
    if course is None:
        raise click.ClickException(f"No course named {name!r}")

    refresher = CourseRefresher(store, get_config(ctx))
    try:
        report = refresher.refresh_course(course)
    except RefreshFailure as e:
        print_report(e.report)
        click.echo(f"Refresh of {course.name} failed.", err=True)
        ctx.exit(1)

    print_report(report)
    click.echo(
        f"Refreshed {course.name}: cache version {course.cache_version}, "
        f"{len(course.exercises)} exercises"
    )
