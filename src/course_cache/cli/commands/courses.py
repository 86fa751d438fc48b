"""Commands for registering, inspecting and removing courses."""

import logging
import shutil

import click
from rich.console import Console
from rich.table import Table

from course_cache.cli.commands.shared import get_config, get_store
from course_cache.core.cache_paths import CachePaths
from course_cache.core.course import Course
from course_cache.infrastructure.database.course_store import DuplicateCourseError

logger = logging.getLogger(__name__)


@click.group(name="course")
def course_group():
    """Register, list and remove courses."""
    pass


@course_group.command(name="add")
@click.argument("name")
@click.argument("source_url")
@click.option("--branch", default="master", show_default=True, help="Branch to clone.")
@click.option("--backend", default="git", show_default=True, help="Source backend kind.")
@click.pass_context
def add_course(ctx, name, source_url, branch, backend):
    """Register a new course NAME whose exercises live at SOURCE_URL."""
    store = get_store(ctx)
    try:
        course = store.add_course(
            Course(name=name, source_url=source_url, git_branch=branch, source_backend=backend)
        )
    except DuplicateCourseError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Added course {course.name} (id {course.id})")


@course_group.command(name="list")
@click.pass_context
def list_courses(ctx):
    """List all registered courses."""
    courses = get_store(ctx).list_courses()
    if not courses:
        click.echo("No courses registered.")
        return

    table = Table(title="Courses")
    table.add_column("Id", justify="right")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Branch")
    table.add_column("Version", justify="right")
    table.add_column("Exercises", justify="right")
    for course in courses:
        table.add_row(
            str(course.id),
            course.name,
            course.source_url,
            course.git_branch,
            str(course.cache_version),
            str(len(course.exercises)),
        )
    Console().print(table)


@course_group.command(name="show")
@click.argument("name")
@click.pass_context
def show_course(ctx, name):
    """Show the exercises, points and checksums of course NAME."""
    course = _find_course(ctx, name)
    paths = CachePaths.for_course(get_config(ctx).cache_root, course)

    click.echo(f"Course: {course.name} (id {course.id})")
    click.echo(f"Source: {course.source_backend} {course.source_url} ({course.git_branch})")
    click.echo(f"Cache version: {course.cache_version}")
    if course.cache_version > 0:
        click.echo(f"Cache: {paths.root}")

    table = Table(title="Exercises")
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("Points")
    table.add_column("Checksum")
    for exercise in course.exercises:
        table.add_row(
            exercise.name,
            exercise.relative_path,
            " ".join(exercise.point_names),
            exercise.checksum[:12],
        )
    Console().print(table)


@course_group.command(name="remove")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def remove_course(ctx, name, yes):
    """Remove course NAME and delete its cache."""
    course = _find_course(ctx, name)
    if not yes:
        click.confirm(f"Remove course {course.name} and its cache?", abort=True)

    paths = CachePaths.for_course(get_config(ctx).cache_root, course)
    get_store(ctx).delete_course(course.id)
    if paths.course_dir.exists():
        shutil.rmtree(paths.course_dir)
    click.echo(f"Removed course {course.name}")


def _find_course(ctx, name) -> Course:
    course = get_store(ctx).find_course(name)
    if course is None:
        raise click.ClickException(f"No course named {name!r}")
    return course
