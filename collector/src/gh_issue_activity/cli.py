"""Command-line interface for gh-issue-activity."""

import logging
import sys

import click
from dotenv import load_dotenv

from .aggregator import aggregate
from .auth import AuthenticationError, get_github_client_from_token
from .classifier import classify_all
from .fetcher import Repository, fetch_all_items
from .models import CacheMode
from .report import render_report
from .snapshot import DEFAULT_SNAPSHOT_PATH, SnapshotStore, needs_remote_fetch, obtain_snapshot

load_dotenv()

logger = logging.getLogger(__name__)

EXIT_MISSING_TOKEN = 3


def parse_cache_mode(ctx: click.Context, param: click.Parameter, value: str) -> CacheMode:
    return CacheMode(value)


def configure_logging(log_file: str, verbose: bool) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        root_logger.addHandler(console_handler)


@click.command()
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub Personal Access Token")
@click.option("--owner", default="docker", show_default=True, help="Repository owner")
@click.option("--repo", default="machine", show_default=True, help="Repository name")
@click.option(
    "--snapshot",
    default=DEFAULT_SNAPSHOT_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Local snapshot file",
)
@click.option(
    "--cache-mode",
    type=click.Choice([mode.value for mode in CacheMode]),
    default=CacheMode.USE_IF_PRESENT.value,
    show_default=True,
    callback=parse_cache_mode,
    help="Whether to read the snapshot file or fetch from GitHub",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
def main(
    token: str | None,
    owner: str,
    repo: str,
    snapshot: str,
    cache_mode: CacheMode,
    verbose: bool,
) -> None:
    """Report daily open/closed activity of a repository's issues and pull requests."""
    repository = Repository(owner=owner, name=repo)
    configure_logging(f"{owner}-{repo}.log", verbose)

    store = SnapshotStore(snapshot)
    client = None
    if needs_remote_fetch(store, cache_mode):
        if not token:
            click.echo("Need the GITHUB_TOKEN env variable.", err=True)
            sys.exit(EXIT_MISSING_TOKEN)
        try:
            logger.info("Authenticating with Personal Access Token")
            client = get_github_client_from_token(token)
        except AuthenticationError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    result = obtain_snapshot(store, cache_mode, lambda: fetch_all_items(client, repository))
    logger.info(f"Using {len(result.items)} items from {result.source}")

    activity = aggregate(classify_all(result.items))
    render_report(activity)

    if result.diagnostics:
        click.echo(f"Warning: {len(result.diagnostics)} problems during the run, data may be incomplete", err=True)
        for diagnostic in result.diagnostics:
            click.echo(f"  {diagnostic}", err=True)


if __name__ == "__main__":
    main()
