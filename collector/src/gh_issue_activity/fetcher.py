"""Fetch the issue history of a repository from the GitHub API."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlparse

import requests
from github import Github, GithubException
from requests.utils import parse_header_links

from .models import Diagnostic, Item, MalformedItemError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


@dataclass(frozen=True)
class Repository:
    """Owner/name pair identifying a repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def issues_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}/issues"


@dataclass
class IssuePage:
    """One page of items plus the page number to request next (0 when done)."""

    items: list[Item]
    next_page: int
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class FetchResult:
    """All items of a repository together with the errors met on the way."""

    items: list[Item] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    pages: int = 0


PageFetcher = Callable[[Github, Repository, int], IssuePage]


def parse_next_page(headers: dict | None) -> int:
    """Extract the next page number from a Link header, 0 if there is none."""
    if not headers:
        return 0
    link = headers.get("link") or headers.get("Link")
    if not link:
        return 0

    for entry in parse_header_links(link):
        if entry.get("rel") != "next":
            continue
        page = parse_qs(urlparse(entry.get("url", "")).query).get("page")
        if page:
            try:
                return int(page[0])
            except ValueError:
                return 0
    return 0


def decode_items(payload, page: int) -> tuple[list[Item], list[Diagnostic]]:
    """Turn a page body into Items, skipping records that fail validation."""
    if not isinstance(payload, list):
        message = f"Page {page}: expected a list, got {type(payload).__name__}"
        logger.warning(message)
        return [], [Diagnostic("fetch", message)]

    items: list[Item] = []
    diagnostics: list[Diagnostic] = []
    for record in payload:
        try:
            items.append(Item.from_api(record))
        except MalformedItemError as e:
            logger.warning(f"Page {page}: skipping record: {e}")
            diagnostics.append(Diagnostic("fetch", f"Page {page}: {e}"))
    return items, diagnostics


def fetch_issue_page(client: Github, repository: Repository, page: int) -> IssuePage:
    """Fetch a single page of issues and pull requests, in any state.

    Errors are recorded on the returned page instead of being raised. The
    next page is still taken from the failed response when it has headers.
    """
    parameters = {"state": "all", "per_page": PAGE_SIZE, "page": page}
    logger.debug(f"Requesting {repository.issues_path} page {page}")

    try:
        headers, data = client.requester.requestJsonAndCheck(
            "GET", repository.issues_path, parameters=parameters
        )
    except GithubException as e:
        logger.warning(f"Failed to fetch page {page} of {repository.full_name}: {e}")
        return IssuePage(
            items=[],
            next_page=parse_next_page(e.headers),
            diagnostics=[Diagnostic("fetch", f"Page {page}: {e}")],
        )
    except requests.RequestException as e:
        logger.warning(f"Transport error on page {page} of {repository.full_name}: {e}")
        response_headers = e.response.headers if e.response is not None else None
        return IssuePage(
            items=[],
            next_page=parse_next_page(response_headers),
            diagnostics=[Diagnostic("fetch", f"Page {page}: {e}")],
        )

    items, diagnostics = decode_items(data, page)
    return IssuePage(items=items, next_page=parse_next_page(headers), diagnostics=diagnostics)


def fetch_all_items(
    client: Github,
    repository: Repository,
    page_fetcher: PageFetcher = fetch_issue_page,
) -> FetchResult:
    """Fetch every issue and pull request of a repository.

    Pages are requested until one reports no next page. A failed page
    contributes no items but does not stop the loop.
    """
    logger.info(f"Fetching issues for: {repository.full_name}")
    result = FetchResult()
    page = 1

    while True:
        issue_page = page_fetcher(client, repository, page)
        result.pages += 1
        result.items.extend(issue_page.items)
        result.diagnostics.extend(issue_page.diagnostics)
        logger.info(f"Got {len(issue_page.items)} items (page {page})")

        if issue_page.next_page == 0:
            break
        page = issue_page.next_page

    logger.info(f"Got {len(result.items)} items in {result.pages} pages")
    return result
