"""Parsing and routing of ``zim://`` URLs served by the reader.

Hosts name what is asked for:

* ``<id>.zim`` for an entry of a ZIM archive, addressed by its path;
* ``<id>.meta`` for metadata about a book, such as ``<id>.favicon.meta``;
* ``<id>.search`` (or ``library.search`` with a ``content`` query item)
  for a full-text search.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlsplit

SCHEME = "zim"
PROTOCOL_PREFIX = "zim://"
CONTENT_SUFFIX = ".zim"
META_SUFFIX = ".meta"
SEARCH_SUFFIX = ".search"
LIBRARY_HOST_ID = "library"
DEFAULT_PAGE_LENGTH = 25


class RequestKind(Enum):
    """What a ``zim://`` request asks for, decided by its host."""

    CONTENT = "content"
    META = "meta"
    SEARCH = "search"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SearchRequest:
    """A full-text search request taken apart."""

    host: str
    book_id: str
    pattern: str
    start: int = 0
    page_length: int = DEFAULT_PAGE_LENGTH

    @property
    def book_query(self) -> str:
        """The query that restricts a search to this book."""
        return f"content={self.book_id}"

    @property
    def search_protocol_prefix(self) -> str:
        """The prefix of links to further result pages."""
        return f"{PROTOCOL_PREFIX}{self.host}/"


def _host(url: str) -> str:
    return urlsplit(url).hostname or ""


def _query_items(url: str) -> list[tuple[str, str]]:
    query = urlsplit(url).query
    items = []
    for part in query.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        items.append((unquote(key), unquote(value)))
    return items


def _query_value(items: list[tuple[str, str]], key: str) -> str:
    return next((value for name, value in items if name == key), "")


def _to_int(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


def zim_id_from_url(url: str) -> str:
    """The book identifier: the first dot-separated label of the host."""
    return _host(url).split(".")[0]


def result_type_from_url(url: str) -> str:
    """The second dot-separated label of the host, such as ``zim`` or ``search``."""
    labels = _host(url).split(".")
    if len(labels) < 2:
        raise ValueError(f"no result type in URL host: {url!r}")
    return labels[1]


def classify_request(url: str) -> RequestKind:
    """Decide which handler serves ``url``."""
    host = _host(url)
    if host.endswith(CONTENT_SUFFIX):
        return RequestKind.CONTENT
    if host.endswith(META_SUFFIX):
        return RequestKind.META
    if host.endswith(SEARCH_SUFFIX):
        return RequestKind.SEARCH
    return RequestKind.UNKNOWN


def content_path(url: str) -> str:
    """The entry path asked for, without its leading slash."""
    path = unquote(urlsplit(url).path)
    return path[1:] if path.startswith("/") else path


def content_zim_id(url: str) -> str:
    """The book identifier of a content request: the host without ``.zim``."""
    host = _host(url)
    if not host.endswith(CONTENT_SUFFIX):
        raise ValueError(f"not a content URL: {url!r}")
    return host[: -len(CONTENT_SUFFIX)]


def parse_search_request(url: str) -> SearchRequest:
    """Take a search URL apart; bad or missing numbers fall back to defaults."""
    host = _host(url)
    items = _query_items(url)
    book_id = host.split(".")[0]
    if book_id == LIBRARY_HOST_ID:
        book_id = _query_value(items, "content")
    start = _to_int(_query_value(items, "start"))
    page_length = _to_int(_query_value(items, "pageLength"))
    return SearchRequest(
        host=host,
        book_id=book_id,
        pattern=_query_value(items, "pattern"),
        start=0 if start is None else start,
        page_length=DEFAULT_PAGE_LENGTH if page_length is None else page_length,
    )


def is_search_results_view(url: str) -> bool:
    """True when ``url`` shows full-text search results."""
    if not any(name == "pattern" for name, _ in _query_items(url)):
        return False
    try:
        return result_type_from_url(url) == "search"
    except ValueError:
        return False


def accepts_navigation(url: str) -> bool:
    """Only ``zim://`` links are opened in the reader; others go to a browser."""
    return urlsplit(url).scheme == SCHEME


def name_for_id(zim_id: str) -> str:
    """The host name used in links for a book identifier."""
    return zim_id + CONTENT_SUFFIX


def id_for_name(name: str) -> str:
    """The book identifier for a host name made by :func:`name_for_id`."""
    if len(name) < len(CONTENT_SUFFIX):
        return name
    return name[: len(name) - len(CONTENT_SUFFIX)]


def strip_mime_parameters(mimetype: str) -> str:
    """Drop parameters such as ``charset`` from a MIME type."""
    return mimetype.split(";")[0]


def home_page_url(zim_id: str) -> str:
    """The URL of a book's main page."""
    return f"{PROTOCOL_PREFIX}{zim_id}{CONTENT_SUFFIX}/"