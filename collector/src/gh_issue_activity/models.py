"""Data models for issue activity analysis."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple, TypedDict

DAY_FORMAT = "%Y-%m-%d"


class MalformedItemError(ValueError):
    """Raised when an issue record violates the item invariants."""


class PullRequestLink(TypedDict, total=False):
    """Pull request linkage attached to an issue record."""

    url: str


class IssueRecord(TypedDict, total=False):
    """An issue as returned by the API and stored in the snapshot."""

    id: int
    number: int
    title: str
    state: str
    created_at: str
    closed_at: str | None
    pull_request: PullRequestLink | None


class ItemState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Category(Enum):
    """Top-level split of the items in a repository."""

    PULL_REQUEST = ("Pull Request", "pull requests")
    ISSUE = ("Issue", "issues")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def plural(self) -> str:
        return self.value[1]


class CacheMode(Enum):
    """How the snapshot file is used for a run."""

    USE_IF_PRESENT = "use-if-present"
    FORCE_REFRESH = "force-refresh"
    FORCE_CACHE_ONLY = "force-cache-only"


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif not isinstance(value, str):
        raise TypeError(f"Expected an ISO-8601 string, got {type(value).__name__}")
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt.microsecond == 0 else dt.isoformat()


@dataclass(frozen=True)
class Item:
    """An issue or pull request.

    Timestamps are normalized to UTC. A naive datetime is taken as UTC.
    """

    id: int
    state: ItemState
    created_at: datetime
    closed_at: datetime | None = None
    pull_request_url: str | None = None
    number: int | None = None
    title: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", ItemState(self.state))
        object.__setattr__(self, "created_at", parse_timestamp(self.created_at))
        object.__setattr__(self, "closed_at", parse_timestamp(self.closed_at))

        if self.state is ItemState.CLOSED:
            if self.closed_at is None:
                raise MalformedItemError(f"Item {self.id} is closed but has no closed_at")
            if self.closed_at < self.created_at:
                raise MalformedItemError(f"Item {self.id} was closed before it was created")
        elif self.closed_at is not None:
            raise MalformedItemError(f"Item {self.id} is open but has closed_at")

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request_url is not None

    @property
    def is_closed(self) -> bool:
        return self.state is ItemState.CLOSED

    @classmethod
    def from_api(cls, record: IssueRecord) -> "Item":
        """Build an Item from an API or snapshot record.

        Reopened issues keep a stale closed_at in the API payload; it is
        dropped for open records.

        Raises:
            MalformedItemError: If the record is incomplete or inconsistent
        """
        if not isinstance(record, dict):
            raise MalformedItemError(f"Expected an object, got {type(record).__name__}")

        try:
            item_id = record["id"]
            state = ItemState(record["state"])
            created_at = parse_timestamp(record["created_at"])
            closed_at = parse_timestamp(record.get("closed_at"))
        except KeyError as e:
            raise MalformedItemError(f"Record {record.get('id')} is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise MalformedItemError(f"Record {record.get('id')} is invalid: {e}") from e

        if created_at is None:
            raise MalformedItemError(f"Record {item_id} has no created_at")
        if state is ItemState.OPEN:
            closed_at = None

        link = record.get("pull_request")
        pull_request_url = None
        if link is not None:
            pull_request_url = link.get("url", "") if isinstance(link, dict) else str(link)

        return cls(
            id=item_id,
            state=state,
            created_at=created_at,
            closed_at=closed_at,
            pull_request_url=pull_request_url,
            number=record.get("number"),
            title=record.get("title") or "",
        )

    def to_dict(self) -> IssueRecord:
        """Serialize to the record shape read by from_api."""
        return {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "state": self.state.value,
            "created_at": format_timestamp(self.created_at),
            "closed_at": format_timestamp(self.closed_at),
            "pull_request": None if self.pull_request_url is None else {"url": self.pull_request_url},
        }


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal error recorded during a run."""

    stage: str
    message: str

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class Classified(NamedTuple):
    """An item routed to its category and bucketing day."""

    category: Category
    day: str
    item: Item


@dataclass
class CategoryTotals:
    """Open and closed counters for one category."""

    open: int = 0
    closed: int = 0

    def add(self, item: Item) -> None:
        if item.is_closed:
            self.closed += 1
        else:
            self.open += 1


@dataclass(frozen=True)
class DayStat:
    """Activity for a single calendar day."""

    day: str
    items: tuple[Item, ...]
    open: int
    closed: int
    ages: tuple[int, ...] = field(default=())

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def net(self) -> int:
        return self.open - self.closed
