"""CLI commands for one-shot configuration fetches."""

import json
import logging
import sys

import click
from pydantic import ValidationError

from configcat_cache import __version__
from configcat_cache.fetch.client import ConfigFetcher
from configcat_cache.fetch.models import (
    ConfigUnchanged,
    ConfigUpdated,
    DataGovernance,
    FetchFailed,
    ResponseError,
)
from configcat_cache.observability.logging import (
    bind_fetcher_context,
    clear_fetcher_context,
    configure_logging,
)
from configcat_cache.settings import get_settings


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """ConfigCat configuration cache CLI."""


@cli.command()
@click.option(
    "--sdk-key",
    "sdk_key",
    default=None,
    help="SDK key (default: CONFIGCAT_SDK_KEY).",
)
@click.option(
    "--base-url",
    "base_url",
    default=None,
    help="Custom endpoint overriding regional routing.",
)
@click.option(
    "--data-governance",
    "data_governance",
    type=click.Choice([d.value for d in DataGovernance]),
    default=None,
    help="Regional origin preference (default: global).",
)
@click.option(
    "--proxy",
    "http_proxy",
    default=None,
    help="HTTP proxy URL.",
)
@click.option(
    "--etag",
    default=None,
    help="Entity tag of a cached document to revalidate.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON format for logs (default: false).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def fetch(  # noqa: PLR0913
    sdk_key: str | None,
    base_url: str | None,
    data_governance: str | None,
    http_proxy: str | None,
    etag: str | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Fetch the configuration document once and print it.

    Exits 0 when the document was downloaded or is unchanged, 1 on failure.
    """
    configure_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=json_logs,
    )

    try:
        options = get_settings().fetcher_options(
            sdk_key=sdk_key,
            base_url=base_url,
            data_governance=data_governance,
            http_proxy=http_proxy,
        )
    except ValidationError as e:
        click.echo("Invalid options:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "options"
            click.echo(f"  - {location}: {error['msg']}", err=True)
        sys.exit(2)

    bind_fetcher_context(options.name or "cli")
    try:
        with ConfigFetcher(options, etag=etag) as fetcher:
            result = fetcher.fetch()
            final_etag = fetcher.etag
    finally:
        clear_fetcher_context()

    if isinstance(result, ConfigUpdated):
        click.echo(json.dumps(result.document, indent=2, sort_keys=True))
        if final_etag:
            click.echo(f"ETag: {final_etag}", err=True)
    elif isinstance(result, ConfigUnchanged):
        click.echo("Configuration unchanged.")
    elif isinstance(result, FetchFailed):
        error = result.error
        if isinstance(error, ResponseError):
            click.echo(f"Fetch failed: HTTP {error.status_code}", err=True)
        else:
            click.echo(f"Fetch failed: {error.error_class.value}", err=True)
        click.echo(f"  {error.message}", err=True)
        sys.exit(1)
