"""Source content resolution for tutorial requests."""

import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Protocol

from tutorialize.domain.errors import ContentExtractionError

logger = logging.getLogger(__name__)

_GITHUB_REPO_PATTERN = re.compile(r"github\.com/([^/]+/[^/]+?)(?:\.git)?(?:/|$)")
_DEFAULT_BRANCHES = ("main", "master")
_NO_README_TEXT = "This repository contains code. No README available."
_FALLBACK_REPO_TEXT = "This repository contains code files."
_SKIPPED_TAGS = {"script", "style", "nav", "footer", "noscript", "template"}


class WebPageClient(Protocol):
    """Interface for fetching raw HTML of a web page."""

    async def fetch_html(self, url: str) -> str:
        """Return the raw HTML body for ``url``."""


class ReadmeClient(Protocol):
    """Interface for fetching a repository README."""

    async def fetch_readme(self, repo_path: str, branch: str) -> str | None:
        """Return README text for ``owner/repo`` on ``branch``, if it exists.

        Raises ``ContentExtractionError`` when the host cannot be reached.
        """


@dataclass
class ContentService:
    """Turns a web page or repository URL into plain source text."""

    web_client: WebPageClient
    readme_client: ReadmeClient
    max_chars: int = 10_000
    min_chars: int = 50

    async def fetch(self, url: str) -> str:
        """Fetch and normalize text for a source URL."""
        if "github.com" in url:
            text = await self._fetch_repository(url)
        else:
            html = await self.web_client.fetch_html(url)
            text = extract_visible_text(html)[: self.max_chars]
        if not text or len(text) < self.min_chars:
            raise ContentExtractionError(
                "Could not extract sufficient content from the URL"
            )
        return text

    async def _fetch_repository(self, url: str) -> str:
        repo_path = parse_repo_path(url)
        if repo_path is None:
            logger.warning("Could not parse repository path from %s", url)
            return _FALLBACK_REPO_TEXT
        try:
            for branch in _DEFAULT_BRANCHES:
                readme = await self.readme_client.fetch_readme(repo_path, branch)
                if readme:
                    return readme
        except ContentExtractionError as exc:
            logger.warning("README fetch failed for %s: %s", repo_path, exc)
            return _FALLBACK_REPO_TEXT
        logger.info("No README found for %s", repo_path)
        return _NO_README_TEXT


def parse_repo_path(url: str) -> str | None:
    """Extract ``owner/repo`` from a GitHub URL."""
    match = _GITHUB_REPO_PATTERN.search(url)
    if not match:
        return None
    return match.group(1)


def extract_visible_text(html: str) -> str:
    """Reduce an HTML document to its visible body text."""
    parser = _VisibleTextParser()
    parser.feed(html)
    parser.close()
    chunks = parser.body_chunks if parser.saw_body else parser.all_chunks
    return re.sub(r"\s+", " ", " ".join(chunks)).strip()


class _VisibleTextParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.body_chunks: list[str] = []
        self.all_chunks: list[str] = []
        self.saw_body = False
        self._in_body = False
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "body":
            self.saw_body = True
            self._in_body = True
        elif tag in _SKIPPED_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag == "body":
            self._in_body = False
        elif tag in _SKIPPED_TAGS and self._skip_depth:
            self._skip_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        self.all_chunks.append(data)
        if self._in_body:
            self.body_chunks.append(data)
