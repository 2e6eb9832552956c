from __future__ import annotations

import logging
from pathlib import Path

import click

from .assertions import TestIdentity, validate
from .cache import DocumentKind
from .cli_options import ConnectionOptions, ValidateOptions
from .config import ValidatorConfig
from .store import FileCacheStore


def connection_options(func):
    func = click.option(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds",
    )(func)
    func = click.option(
        "--proxy-port",
        type=int,
        default=None,
        help="Port of the HTTP proxy to route validator requests through",
    )(func)
    func = click.option(
        "--proxy-host",
        type=str,
        default=None,
        help="Host of the HTTP proxy to route validator requests through",
    )(func)
    func = click.option(
        "--cache-dir",
        type=click.Path(file_okay=False, path_type=str),
        default=None,
        help="Directory holding cached validator responses",
    )(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log cache and network activity")
def click_main(verbose: bool) -> None:
    """Check markup and CSS against the W3C validators, caching the results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click_main.command("markup")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=str))
@connection_options
def markup_command(path: str, cache_dir, proxy_host, proxy_port, timeout) -> None:
    """Validate an HTML/XHTML file."""
    connection = ConnectionOptions(cache_dir, proxy_host, proxy_port, timeout)
    _run_validate(ValidateOptions(path=path, kind=DocumentKind.MARKUP, connection=connection))


@click_main.command("css")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=str))
@connection_options
def css_command(path: str, cache_dir, proxy_host, proxy_port, timeout) -> None:
    """Validate a CSS file."""
    connection = ConnectionOptions(cache_dir, proxy_host, proxy_port, timeout)
    _run_validate(ValidateOptions(path=path, kind=DocumentKind.CSS, connection=connection))


@click_main.command("clear-cache")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in DocumentKind], case_sensitive=False),
    default=None,
    help="Only clear responses for this document kind",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=str),
    default=None,
    help="Directory holding cached validator responses",
)
def clear_cache_command(kind: str | None, cache_dir: str | None) -> None:
    """Remove cached validator responses."""
    store = FileCacheStore(cache_dir, config=_env_config())
    removed = store.clear(DocumentKind(kind.lower()) if kind else None)
    click.echo(f"Removed {removed} cached file(s) from {store.cache_dir}")


def _env_config() -> ValidatorConfig:
    try:
        return ValidatorConfig.from_env()
    except ValueError as e:
        raise click.UsageError(f"Invalid ASSERT_VALID_* environment setting: {e}") from e


def _run_validate(options: ValidateOptions) -> None:
    if not options.connection.has_complete_proxy():
        raise click.UsageError("--proxy-host and --proxy-port must be given together")

    config = options.connection.to_config(_env_config())
    path = Path(options.path)
    identity = TestIdentity(class_name="cli", method_name=path.resolve().as_posix())
    verdict = validate(
        path.read_text(encoding="utf-8"),
        options.kind,
        identity=identity,
        config=config,
    )

    if verdict.valid:
        click.echo(f"{path}: valid {options.kind.value}")
        return
    click.echo(f"{path}: invalid {options.kind.value}")
    for message in verdict.messages:
        click.echo(f"  {message}")
    raise SystemExit(1)


def main() -> None:
    click_main(standalone_mode=True)


if __name__ == "__main__":
    main()
