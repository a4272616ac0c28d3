"""Content extractor: turn raw markup into a ContentFacts sheet.

No network access happens during extraction. `fetch_markup` is the only
helper that talks to the network and it is used by the API layer when a
caller posts a URL without markup.
"""

import logging

import requests
from bs4 import BeautifulSoup

import config
from models import ContentFacts

logger = logging.getLogger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def empty_facts() -> ContentFacts:
    return {
        "title": "",
        "description": "",
        "keywords": [],
        "headings": {"h1": [], "h2": []},
        "images": [],
        "links": [],
        "word_count": 0,
    }


def parse_markup(markup: str | None) -> BeautifulSoup:
    """Parse markup with the stdlib-backed parser; never raises on bad HTML."""
    return BeautifulSoup(markup or "", "html.parser")


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    for tag in soup.find_all("meta"):
        if str(tag.get("name") or "").strip().lower() == name:
            return str(tag.get("content") or "").strip()
    return ""


class ContentExtractor:
    """Interface: anything with `extract(markup) -> ContentFacts`."""

    def extract(self, markup: str | None) -> ContentFacts:
        raise NotImplementedError


class SoupContentExtractor(ContentExtractor):
    """Default extractor backed by BeautifulSoup."""

    def extract(self, markup: str | None) -> ContentFacts:
        if not markup or not markup.strip():
            return empty_facts()

        soup = parse_markup(markup)

        title = ""
        if soup.title is not None:
            title = soup.title.get_text(" ", strip=True)

        description = _meta_content(soup, "description")
        raw_keywords = _meta_content(soup, "keywords")
        keywords = [kw.strip() for kw in raw_keywords.split(",") if kw.strip()]

        h1 = [h.get_text(" ", strip=True) for h in soup.find_all("h1")]
        h2 = [h.get_text(" ", strip=True) for h in soup.find_all("h2")]

        images = []
        for img in soup.find_all("img"):
            alt = img.get("alt")
            images.append(
                {
                    "src": str(img.get("src") or ""),
                    "alt": str(alt or ""),
                    "has_alt": alt is not None,
                }
            )

        links = [
            {"href": str(a.get("href") or ""), "text": a.get_text(" ", strip=True)}
            for a in soup.find_all("a", href=True)
        ]

        # Tags are stripped without a separator so inline markup does not split words
        word_count = len([token for token in soup.get_text().split() if token])

        return {
            "title": title,
            "description": description,
            "keywords": keywords,
            "headings": {"h1": h1, "h2": h2},
            "images": images,
            "links": links,
            "word_count": word_count,
        }


default_extractor: ContentExtractor = SoupContentExtractor()


def extract_content(markup: str | None, extractor: ContentExtractor | None = None) -> ContentFacts:
    """
    Extract a ContentFacts sheet from `markup`.
    On any parse failure returns safe defaults. Never raises.
    """
    try:
        return (extractor or default_extractor).extract(markup)
    except Exception:
        logger.exception("Content extraction failed, using empty facts")
        return empty_facts()


def fetch_markup(url: str) -> str:
    """
    Fetch the page at `url` and return its markup.
    On any failure (network, invalid URL, bad status) returns an empty string.
    """
    try:
        response = requests.get(url, timeout=config.FETCH_TIMEOUT_SECONDS, headers=_REQUEST_HEADERS)
        response.raise_for_status()
        response.encoding = response.apparent_encoding or "utf-8"
        return response.text
    except (requests.RequestException, ValueError, OSError) as e:
        logger.warning("Could not fetch %s: %s", url, e)
        return ""
