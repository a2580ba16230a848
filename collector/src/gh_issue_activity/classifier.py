"""Route items to a category and the day they are counted on."""

from collections.abc import Iterable, Iterator

from .models import DAY_FORMAT, Category, Classified, Item


def bucket_day(item: Item) -> str:
    """Closure day for closed items, creation day otherwise."""
    if item.is_closed:
        return item.closed_at.strftime(DAY_FORMAT)
    return item.created_at.strftime(DAY_FORMAT)


def classify(item: Item) -> Classified:
    category = Category.PULL_REQUEST if item.is_pull_request else Category.ISSUE
    return Classified(category=category, day=bucket_day(item), item=item)


def classify_all(items: Iterable[Item]) -> Iterator[Classified]:
    for item in items:
        yield classify(item)
