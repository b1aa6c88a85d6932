"""Command-line entry point for blogsmith."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from .commands import duplicates as duplicates_cmd
from .commands import generate_html as html_cmd
from .commands import inspect as inspect_cmd
from .commands import links as links_cmd
from .commands import lint as lint_cmd
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .processors.post_loader import discover_posts
from .processors.validator import has_errors, summarize

# Setup logging early so submodules inherit sane defaults
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

_PATHS = click.argument("paths", nargs=-1, type=click.Path(exists=True))


@click.group()
@click.option(
    "--config",
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="Path to config file (defaults to data_dir/config/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """blogsmith - validate, inspect and index Markdown blog posts."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command("lint")
@_PATHS
@click.option("--strict", is_flag=True, help="Treat warnings as failures")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def lint(ctx: click.Context, paths: tuple[str, ...], strict: bool, as_json: bool) -> None:
    """Validate front matter, code fences, math and images of posts."""
    try:
        results = lint_cmd.run(ctx.obj["config_path"], list(paths) or None)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Lint command failed: {exc}", err=True)
        sys.exit(1)

    totals = summarize(results)
    if as_json:
        payload = {
            "summary": totals,
            "posts": {
                str(path): [
                    {"severity": i.severity, "code": i.code, "message": i.message, "line": i.line}
                    for i in issues
                ]
                for path, issues in results.items()
            },
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        for path, issues in results.items():
            for issue in issues:
                click.echo(issue.format(path))
        click.echo(
            f"Checked {totals['posts']} post(s): {totals['errors']} error(s), {totals['warnings']} warning(s)"
        )

    failed = any(has_errors(issues, strict) for issues in results.values())
    if failed:
        sys.exit(1)
    if not as_json:
        click.echo("✅ All posts passed")


@cli.command("inspect")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the full parse as JSON")
def inspect(path: str, as_json: bool) -> None:
    """Show front matter and body elements parsed from one post."""
    try:
        data = inspect_cmd.run(path)
        output = json.dumps(data, indent=2) if as_json else inspect_cmd.format_summary(data)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Inspect failed: {exc}", err=True)
        sys.exit(1)

    click.echo(output)


@cli.command("duplicates")
@_PATHS
@click.option("--threshold", type=click.FloatRange(0.0, 1.0, min_open=True), help="Similarity threshold (overrides config)")
@click.pass_context
def duplicates(ctx: click.Context, paths: tuple[str, ...], threshold: float | None) -> None:
    """Report pairs of posts with near-identical prose."""
    try:
        pairs = duplicates_cmd.run(ctx.obj["config_path"], list(paths) or None, threshold)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Duplicates command failed: {exc}", err=True)
        sys.exit(1)

    if not pairs:
        click.echo("✅ No near-duplicate posts found")
        return
    for pair in pairs:
        click.echo(f"{pair.score:.3f}  {pair.first.path}  <->  {pair.second.path}")


@cli.command("links")
@_PATHS
@click.option("--rps", type=float, help="Requests per second throttle (overrides config)")
@click.option("--refresh", is_flag=True, help="Ignore cached results")
@click.pass_context
def links(ctx: click.Context, paths: tuple[str, ...], rps: float | None, refresh: bool) -> None:
    """Check external links and remote images referenced by posts."""
    try:
        usages = links_cmd.run(ctx.obj["config_path"], list(paths) or None, rps=rps, refresh=refresh)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Link check failed: {exc}", err=True)
        sys.exit(1)

    broken = [usage for usage in usages if usage.result and not usage.result.ok]
    for usage in broken:
        for path, line in usage.locations:
            click.echo(f"{path}:{line}: broken link {usage.url} ({usage.result.error})")
    click.echo(f"Checked {len(usages)} URL(s): {len(broken)} broken")
    if broken:
        sys.exit(1)


@cli.command("html")
@_PATHS
@click.option("--output", help="Output file (default: html.output from config, under the data dir)")
@click.option("--group-by", type=click.Choice(["date", "tag"]), help="Group posts by year or by tag")
@click.option("--title", help="Page title (overrides config)")
@click.pass_context
def html(
    ctx: click.Context,
    paths: tuple[str, ...],
    output: str | None,
    group_by: str | None,
    title: str | None,
) -> None:
    """Write an HTML index of posts."""
    try:
        target = html_cmd.run(
            ctx.obj["config_path"],
            list(paths) or None,
            output=str(Path(output).resolve()) if output else None,
            group_by=group_by,
            title=title,
        )
        click.echo(f"✅ HTML index written to {target}")
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ HTML generation failed: {exc}", err=True)
        sys.exit(1)


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration and posts directory status."""
    try:
        config_manager = ConfigManager(ctx.obj["config_path"])
        click.echo(f"📄 Config file: {config_manager.config_path}")

        if config_manager.validate_config():
            click.echo("✅ Configuration is valid")
        else:
            click.echo("❌ Configuration validation failed")
            return

        posts_dir = config_manager.get_posts_dir()
        click.echo(f"📁 Posts directory: {posts_dir}")
        if posts_dir.is_dir():
            count = sum(1 for _ in discover_posts(posts_dir, config_manager.get_post_patterns()))
            click.echo(f"📝 Posts found: {count}")
        else:
            click.echo("⚠️  Posts directory does not exist")
        click.echo(f"🌐 Site root: {config_manager.get_site_root()}")

    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Error checking status: {exc}", err=True)


if __name__ == "__main__":  # pragma: no cover - script entry
    cli()
