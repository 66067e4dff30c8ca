import re
from typing import NamedTuple
from urllib.parse import urlsplit

_URL_RE = re.compile(
    r"(https?://[^\s<>\"{}|\\^`\[\]]+"
    r"|www\.[^\s<>\"{}|\\^`\[\]]+"
    r"|[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]?\.[a-zA-Z]{2,}[^\s<>\"{}|\\^`\[\]]*)",
    re.IGNORECASE,
)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_TRAILING_JUNK = (".,;:!?", ")]'\"", "}")

DEFAULT_SCHEME = "https://"


class ParsedLink(NamedTuple):
    url: str
    title: str | None


def ensure_scheme(url: str) -> str:
    url = url.strip()
    if url and not _SCHEME_RE.match(url):
        url = DEFAULT_SCHEME + url.lstrip("/")
    return url


def url_key(url: str) -> str:
    """Comparison key for duplicate detection. Never stored."""
    url = ensure_scheme(url)
    return url.lower().rstrip("/")


def _clean_match(raw: str) -> str | None:
    for chars in _TRAILING_JUNK:
        raw = raw.rstrip(chars)
    if not raw.lower().startswith(("http://", "https://")):
        if "." not in raw or raw.startswith("."):
            return None
        raw = DEFAULT_SCHEME + raw
    parts = urlsplit(raw)
    if not parts.netloc or "." not in parts.netloc:
        return None
    return raw


def _find_urls(text: str) -> list[tuple[int, str]]:
    found = []
    for match in _URL_RE.finditer(text):
        url = _clean_match(match.group(0))
        if url:
            found.append((match.start(), url))
    return found


def extract_first_url(text: str) -> str | None:
    found = _find_urls(text)
    return found[0][1] if found else None


def parse_link_entry(entry: str) -> ParsedLink | None:
    """Parse ``"Title|URL"`` or free text containing a URL.

    Text before the first URL becomes the title when no explicit title is
    given. Returns None when the entry holds no usable URL.
    """
    line = entry.strip()
    if not line:
        return None

    if "|" in line:
        title, _, rest = line.partition("|")
        url = extract_first_url(rest)
        if url:
            return ParsedLink(url=url, title=title.strip() or None)

    found = _find_urls(line)
    if not found:
        return None
    start, url = found[0]
    title = line[:start].strip()
    return ParsedLink(url=url, title=title or None)
