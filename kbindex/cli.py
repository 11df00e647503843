"""CLI entrypoint for kbindex."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import CONFIG_FILENAME, Settings, load_settings


def _auto_detect_site(start: Path, root_segment: str) -> Path | None:
    """Find the directory holding the root segment by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if p.name == root_segment and p.is_dir():
            return p.parent
        if (p / root_segment).is_dir():
            return p
    return None


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


@click.group()
@click.version_option(__version__, prog_name="kbindex")
@click.option(
    "--root",
    "-r",
    "site_dir",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Site directory containing the content root (defaults to auto-detected)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Settings file (defaults to <root>/{CONFIG_FILENAME} if present)",
)
@click.option(
    "--base-url",
    default=None,
    help="Fetch metadata and documents from this HTTP server instead of disk",
)
@click.option("--verbose", is_flag=True, help="Log cache and retrieval activity")
@click.pass_context
def cli(
    ctx: click.Context,
    site_dir: Path | None,
    config_path: Path | None,
    base_url: str | None,
    verbose: bool,
) -> None:
    """kbindex - index versioned KB documents across dependent projects."""
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    try:
        settings = load_settings(config_path) if config_path else Settings()
    except ValueError as e:
        raise click.ClickException(f"Invalid settings in {config_path}: {e}")

    if site_dir is None:
        detected = _auto_detect_site(Path.cwd(), settings.root_segment)
        if detected is None:
            raise click.ClickException(
                f"Content root '{settings.root_segment}' not found. Pass --root /path/to/site."
            )
        site_dir = detected

    if not site_dir.exists() or not site_dir.is_dir():
        raise click.BadParameter(f"Directory '{site_dir}' does not exist.", param_hint="--root / -r")

    if config_path is None:
        try:
            settings = load_settings(site_dir / CONFIG_FILENAME)
        except ValueError as e:
            raise click.ClickException(f"Invalid settings in {site_dir / CONFIG_FILENAME}: {e}")

    ctx.obj["site_dir"] = site_dir.resolve()
    ctx.obj["settings"] = settings
    ctx.obj["base_url"] = base_url


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output the catalog as JSON")
@click.option("--project", "-p", default=None, help="Only show this project")
@click.pass_context
def catalog(ctx: click.Context, output_json: bool, project: str | None) -> None:
    """Build the merged catalog and summarize it.

    Examples:

        kbindex catalog

        kbindex catalog --project Beta --json
    """
    from .commands.catalog_cmd import run_catalog

    exit_code = run_catalog(
        ctx.obj["site_dir"],
        ctx.obj["settings"],
        http_base_url=ctx.obj["base_url"],
        output_json=output_json,
        project=project,
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("project")
@click.pass_context
def deps(ctx: click.Context, project: str) -> None:
    """Show PROJECT's resolved dependencies, lowest priority first."""
    from .commands.catalog_cmd import run_deps

    exit_code = run_deps(ctx.obj["site_dir"], ctx.obj["settings"], project, http_base_url=ctx.obj["base_url"])
    sys.exit(exit_code)


@cli.command()
@click.pass_context
def cycles(ctx: click.Context) -> None:
    """List declared dependency cycles (exit 1 if any)."""
    from .commands.catalog_cmd import run_cycles

    exit_code = run_cycles(ctx.obj["site_dir"], ctx.obj["settings"], http_base_url=ctx.obj["base_url"])
    sys.exit(exit_code)


@cli.command()
@click.argument("project")
@click.argument("file_path")
@click.option("--version", "-V", "version", default=None, help="Document version (default: latest)")
@click.option("--frontmatter", "show_frontmatter", is_flag=True, help="Print front matter as JSON instead of the body")
@click.pass_context
def show(ctx: click.Context, project: str, file_path: str, version: str | None, show_frontmatter: bool) -> None:
    """Print a catalog document of PROJECT at FILE_PATH (extension omitted).

    Inherited documents are shown as resolved for PROJECT.
    """
    from .commands.catalog_cmd import run_show

    exit_code = run_show(
        ctx.obj["site_dir"],
        ctx.obj["settings"],
        project,
        file_path,
        version=version,
        show_frontmatter=show_frontmatter,
        http_base_url=ctx.obj["base_url"],
    )
    sys.exit(exit_code)


@cli.command()
@click.pass_context
def watch(ctx: click.Context) -> None:
    """Rebuild the catalog whenever files under the root change.

    Runs until interrupted (Ctrl+C). Only local directories can be watched.
    """
    if ctx.obj["base_url"]:
        raise click.UsageError("watch reads from disk; drop --base-url")

    from .commands.watch_cmd import run_watch

    run_watch(ctx.obj["site_dir"], ctx.obj["settings"])


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
