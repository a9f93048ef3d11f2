"""Userstyles CLI entry point."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import click

from userstyles.config import DATA_DIR_ENV, UserstylesConfig


@click.group()
@click.option(
    "--data-dir",
    envvar=DATA_DIR_ENV,
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding styles/ and styles.db",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, data_dir: str | None, verbose: bool) -> None:
    """Userstyles: per-site user stylesheets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if data_dir is None:
        ctx.obj = UserstylesConfig.from_env()
    else:
        ctx.obj = UserstylesConfig(data_dir=data_dir)


@contextmanager
def _loaded_registry(config: UserstylesConfig):
    from userstyles.runner import UserstylesRunner

    runner = UserstylesRunner(config)
    try:
        registry = runner.initialize()
        yield registry, registry.reload()
    finally:
        runner.close()


def _echo_failures(result) -> None:
    for diagnostic in result.failures:
        click.echo(str(diagnostic), err=True)


@cli.command()
@click.pass_obj
def reload(config: UserstylesConfig) -> None:
    """Reload user stylesheets and report files that failed to load."""
    with _loaded_registry(config) as (registry, result):
        click.echo(f"Loaded {len(result.loaded)} stylesheets from {config.styles_dir}")
        for file_id in result.loaded:
            click.echo(f"  {file_id}")
        _echo_failures(result)
        if result.failures:
            click.echo(f"{len(result.failures)} stylesheets failed to load", err=True)


@cli.command("list")
@click.option("--url", default="", help="Show which stylesheets are active for this address")
@click.pass_obj
def list_styles(config: UserstylesConfig, url: str) -> None:
    """List installed userstyles."""
    from userstyles.menu import COLUMNS, StylesheetMenu
    from userstyles.views import PageView

    with _loaded_registry(config) as (registry, result):
        _echo_failures(result)
        if not registry.stylesheets:
            click.echo("No userstyles installed.")
            return
        if url:
            registry.open_view(PageView(view_id="cli", uri=url))
        menu = StylesheetMenu(registry)
        rows = menu.open("cli", "cli")
        click.echo("\t".join(COLUMNS))
        for row in rows:
            click.echo("\t".join(row.cells()))
        menu.close("cli")


@cli.command()
@click.argument("file_id")
@click.pass_obj
def toggle(config: UserstylesConfig, file_id: str) -> None:
    """Enable/disable the stylesheet FILE_ID."""
    with _loaded_registry(config) as (registry, _result):
        try:
            enabled = registry.toggle(file_id)
        except KeyError:
            raise click.ClickException(f"No stylesheet named {file_id!r} is loaded")
        click.echo(f"{file_id}: {'enabled' if enabled else 'disabled'}")


@cli.command()
@click.argument("url")
@click.pass_obj
def match(config: UserstylesConfig, url: str) -> None:
    """Show the rule blocks that apply to URL."""
    from userstyles.matching.domains import PageAddress
    from userstyles.matching.engine import evaluate
    from userstyles.stylesheet.parser import format_predicates

    address = PageAddress.from_uri(url)
    with _loaded_registry(config) as (registry, result):
        _echo_failures(result)
        click.echo(f"Domains: {', '.join(address.domains) or '(none)'}")
        count = 0
        for activation in evaluate(registry.stylesheets, address):
            if not activation.active:
                continue
            count += 1
            predicates = format_predicates(activation.block.predicates)
            click.echo(f"{activation.stylesheet.file_id}: {predicates}")
        if count == 0:
            click.echo("No rule blocks apply.")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def check(path: str) -> None:
    """Parse the stylesheet at PATH and print its rule blocks."""
    from userstyles.stylesheet.errors import StylesheetError
    from userstyles.stylesheet.parser import format_predicates, parse_stylesheet

    file_id = Path(path).name
    source = Path(path).read_text(encoding="utf-8")
    try:
        blocks = parse_stylesheet(source, file_id=file_id)
    except StylesheetError as exc:
        raise click.ClickException(f"{exc.location()}: {exc}")

    click.echo(f"{file_id}: {len(blocks)} rule blocks")
    for index, block in enumerate(blocks, 1):
        predicates = format_predicates(block.predicates) or "(no recognized rules)"
        click.echo(f"  [{index}] {predicates} ({len(block.css.strip())} chars of CSS)")


@cli.command()
@click.option("--host", default=None, help="Host to bind to [default: config host]")
@click.option("--port", default=None, type=int, help="Port to bind to [default: config port]")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
@click.pass_obj
def serve(config: UserstylesConfig, host: str | None, port: int | None, debug: bool) -> None:
    """Start the userstyles web API."""
    from userstyles.web.app import create_app

    config = replace(
        config,
        host=host if host is not None else config.host,
        port=port if port is not None else config.port,
    )
    app = create_app(config=config)
    click.echo(f"Serving userstyles from {config.styles_dir} on {config.host}:{config.port}")
    try:
        app.run(host=config.host, port=config.port, debug=debug)
    finally:
        app.extensions["runner"].close()
