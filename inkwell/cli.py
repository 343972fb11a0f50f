"""Command-line interface for Inkwell.

This module defines the CLI commands using Click framework.
It provides commands for creating new projects and posts, building sites,
and running the preview server.

Commands:
- build: Build the site into the output directory.
- serve: Build, serve and rebuild the site on change.
- init: Scaffold a new blog project.
- post: Create a new post interactively.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import questionary

from . import __version__
from .config import DEFAULT_CONFIG_PATH
from .errors import BuildError
from .scaffold import create_post, init_project

DEFAULT_OUTPUT_DIR = Path("dist")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route log records to stderr at WARNING, INFO (verbose) or DEBUG."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
def cli():
    """Inkwell static blog generator."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the configuration file",
)
@click.option(
    "--output",
    "output_dir",
    type=click.Path(path_type=Path),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory",
)
@click.option("--verbose", is_flag=True, help="Show build progress")
@click.option("--debug", is_flag=True, help="Show resolved paths and debug output")
def build(config_path: Path, output_dir: Path, verbose: bool, debug: bool):
    """Build the site into the output directory."""
    configure_logging(verbose, debug)
    from .build import build_site

    try:
        result = build_site(config_path, output_dir, verbose=verbose, debug=debug)
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Stage: {exc.stage}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None

    if result.failed:
        click.echo(
            click.style(f"Failed page types: {', '.join(result.failed)}", fg="yellow"),
            err=True,
        )
    if not result.succeeded:
        raise SystemExit(1)
    click.echo(
        f"Built {len(result.documents)} posts ({len(result.written)} files) into {result.output_dir}"
    )


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the configuration file",
)
@click.option(
    "--output",
    "output_dir",
    type=click.Path(path_type=Path),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory",
)
@click.option("--port", type=int, default=3000, show_default=True, help="Port to serve on")
@click.option("--verbose", is_flag=True, help="Show build progress")
def serve(config_path: Path, output_dir: Path, port: int, verbose: bool):
    """Build the site, serve it and rebuild on change."""
    configure_logging(verbose)
    from .server import PreviewServer

    PreviewServer(config_path, output_dir, port=port).start()


@cli.command()
@click.option(
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project directory",
)
def init(directory: Path):
    """Scaffold a new blog project."""
    configure_logging()
    target = directory.resolve()
    created = init_project(target)
    for path in created:
        click.echo(f"Created {path.relative_to(target)}")
    click.echo(f"\nBlog initialized in {target / 'blog'}")
    click.echo("\nTo build your blog, run:\n  inkwell build")
    click.echo("\nTo preview it locally, run:\n  inkwell serve")


@cli.command()
@click.option(
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("blog"),
    show_default=True,
    help="Blog directory",
)
@click.option("--title", help="Post title (prompted for when omitted)")
def post(directory: Path, title: str | None):
    """Create a new post with a frontmatter stub."""
    configure_logging()
    if title is None:
        title = questionary.text(
            "Title of the new post:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()

    try:
        created = create_post(title, directory)
    except (ValueError, FileExistsError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {created.path}")
    click.echo(f"Slug: {created.slug}")


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
