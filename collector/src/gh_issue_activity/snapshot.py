"""Local snapshot of the fetched items, used as an on/off cache."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .fetcher import FetchResult
from .models import CacheMode, Diagnostic, Item, MalformedItemError

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_PATH = "issues.json"


@dataclass
class LoadResult:
    items: list[Item] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class SnapshotResult:
    """Items for this run, where they came from, and what went wrong."""

    items: list[Item] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    source: str = "cache"


class SnapshotStore:
    """Reads and writes the whole item collection as a single JSON file."""

    def __init__(self, path: str | Path = DEFAULT_SNAPSHOT_PATH):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, items: list[Item]) -> list[Diagnostic]:
        """Overwrite the snapshot file with the given items."""
        try:
            payload = json.dumps([item.to_dict() for item in items], separators=(",", ":"))
            self.path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write {self.path}: {e}")
            return [Diagnostic("snapshot", f"Failed to write {self.path}: {e}")]

        logger.info(f"Wrote {len(items)} items to {self.path}")
        return []

    def load(self) -> LoadResult:
        """Read the snapshot file.

        A file that cannot be read or parsed gives an empty result. Records
        that fail validation are skipped.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {self.path}: {e}")
            return LoadResult(diagnostics=[Diagnostic("snapshot", f"Failed to read {self.path}: {e}")])

        if not isinstance(data, list):
            message = f"{self.path} does not hold a list of items"
            logger.warning(message)
            return LoadResult(diagnostics=[Diagnostic("snapshot", message)])

        result = LoadResult()
        for record in data:
            try:
                result.items.append(Item.from_api(record))
            except MalformedItemError as e:
                logger.warning(f"Skipping snapshot record: {e}")
                result.diagnostics.append(Diagnostic("snapshot", str(e)))

        logger.info(f"Read {len(result.items)} items from {self.path}")
        return result


def needs_remote_fetch(store: SnapshotStore, mode: CacheMode) -> bool:
    if mode is CacheMode.FORCE_REFRESH:
        return True
    if mode is CacheMode.FORCE_CACHE_ONLY:
        return False
    return not store.exists()


def obtain_snapshot(
    store: SnapshotStore,
    mode: CacheMode,
    fetch: Callable[[], FetchResult],
) -> SnapshotResult:
    """Get the items for a run from the snapshot file or the remote API.

    With USE_IF_PRESENT the file is checked before anything else: when it
    exists it is loaded and fetch is never called, otherwise fetch runs once
    and its items are saved once.
    """
    if mode is CacheMode.FORCE_CACHE_ONLY and not store.exists():
        message = f"{store.path} not found and remote fetching is disabled"
        logger.warning(message)
        return SnapshotResult(diagnostics=[Diagnostic("snapshot", message)])

    if not needs_remote_fetch(store, mode):
        logger.info(f"Reading local issues from {store.path}")
        loaded = store.load()
        return SnapshotResult(items=loaded.items, diagnostics=loaded.diagnostics, source="cache")

    logger.info("Retrieving remote issues")
    fetched = fetch()
    diagnostics = list(fetched.diagnostics)
    diagnostics.extend(store.save(fetched.items))
    return SnapshotResult(items=fetched.items, diagnostics=diagnostics, source="remote")
