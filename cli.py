"""
Command-line entry points: seed demo data, print a feed page, sync and
inspect the local legislator directory.
"""
from __future__ import annotations

import json
import logging
import sys

import click

from app import configure_logging
from directory import build_directory_cache
from directory import load_settings as load_directory_settings
from directory.serialization import entry_to_dict
from feed import build_aggregator
from feed import load_settings as load_feed_settings
from feed.serialization import page_to_dict
from storage import ContentStore
from storage.seed import seed_demo_content
from utils.errors import CivicFeedError


@click.group()
@click.option("--verbose", is_flag=True, help="Log at DEBUG level.")
def cli(verbose: bool):
    configure_logging(logging.DEBUG if verbose else logging.INFO)


@cli.command()
def seed():
    """Load demo users, posts, events, petitions and legislators."""
    settings = load_feed_settings()
    store = ContentStore(settings.database_url)
    try:
        counts = seed_demo_content(store)
    finally:
        store.dispose()
    click.echo(json.dumps(counts))


@cli.command()
@click.option("--page", default=1, type=int)
@click.option("--limit", default=None, type=int)
@click.option("--search", default=None)
def feed(page: int, limit, search):
    """Print one aggregated feed page as JSON."""
    settings = load_feed_settings()
    store = ContentStore(settings.database_url)
    try:
        result = build_aggregator(store, settings).aggregate(page, limit or settings.default_limit, search)
    except CivicFeedError as exc:
        click.echo(f"feed failed: {exc}", err=True)
        sys.exit(1)
    finally:
        store.dispose()
    click.echo(json.dumps(page_to_dict(result), ensure_ascii=False, indent=2))


@cli.command("sync-directory")
@click.option("--force", is_flag=True, help="Sync even when the cache is fresh.")
def sync_directory(force: bool):
    """Refresh the local legislator cache from the configured source."""
    cache = build_directory_cache(load_directory_settings())
    try:
        entries = cache.sync() if force else cache.get_all_fresh()
    except CivicFeedError as exc:
        click.echo(f"directory sync failed: {exc}", err=True)
        sys.exit(1)
    click.echo(json.dumps(cache.snapshot()))
    click.echo(f"{len(entries)} legislators cached")


@cli.command()
@click.option("--search", default=None)
@click.option("--id", "external_id", default=None)
def directory(search, external_id):
    """Read from the local legislator cache without touching the network."""
    cache = build_directory_cache(load_directory_settings())
    if external_id:
        entry = cache.get(external_id)
        if entry is None:
            click.echo(f"{external_id} not cached", err=True)
            sys.exit(1)
        click.echo(json.dumps(entry_to_dict(entry), ensure_ascii=False))
        return
    for entry in cache.search(search):
        click.echo(f"{entry.display_name} ({entry.party.value}, {entry.seat_label})")


if __name__ == "__main__":  # pragma: no cover
    cli()
