"""
Pytest configuration and fixtures for FocusReader tests.
"""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from focusreader.annotation import AnnotationState
from focusreader.progress import MemoryStore

DAY_MS = 24 * 60 * 60 * 1000

ARTICLE_URL = "https://www.example.com/posts/ubiquitous-computing"

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Ubiquitous Computing | Example News</title>
  <meta property="og:site_name" content="Example News">
  <meta name="author" content="Meta Author">
  <script>window.analytics = {};</script>
</head>
<body>
  <header class="site-header">
    <nav><a href="/">Home</a> <a href="/about">About</a></nav>
  </header>
  <article class="post">
    <h1>Understanding Ubiquitous Computing</h1>
    <p class="byline"><a rel="author" href="/jane">Jane Doe</a>
      <time datetime="2024-03-03T10:00:00Z">March 3</time></p>
    <p onclick="track()">Ubiquitous computing describes a world where small devices
      fade into the background of daily life. The idea is ubiquitous in research
      labs and product teams alike.</p>
    <p>Early prototypes from the 1990s included tabs, pads and boards. Engineers
      measured how people actually used them, and the results shaped later designs.</p>
    <h2 id="background">Background</h2>
    <p>The background section explains why this matters.</p>
    <script>track("view");</script>
    <div class="share">Share this</div>
    <pre><code>print("hello")</code></pre>
    <p>   </p>
    <img src="diagram.png" width="600" onload="track()">
  </article>
  <footer>Copyright Example News</footer>
</body>
</html>
"""

# Only a 40-character body and no article-like containers
TINY_HTML = "<html><body><p>" + "x" * 40 + "</p></body></html>"


class FakeCollaborator:
    """Text-inference collaborator that answers from a lookup table.

    Terms missing from `answers` get `default`; a default of None omits
    the line entirely, like a model that forgot a term.
    """

    def __init__(
        self,
        answers: dict[str, str] | None = None,
        default: str | None = "SKIP",
        error: str | None = None,
        raises: Exception | None = None,
    ):
        self.answers = answers or {}
        self.default = default
        self.error = error
        self.raises = raises
        self.calls: list[tuple[str, str]] = []

    async def request(self, prompt: str, context: str) -> dict[str, str]:
        self.calls.append((prompt, context))
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            return {"error": self.error}

        lines = []
        for term in prompt_terms(prompt):
            value = self.answers.get(term, self.default)
            if value is not None:
                lines.append(f"{term}:{value}")
        return {"answer": "\n".join(lines)}

    @property
    def requested_terms(self) -> list[str]:
        return [term for prompt, _ in self.calls for term in prompt_terms(prompt)]


def prompt_terms(prompt: str) -> list[str]:
    """Terms listed on the final "Words:" / "Terms:" line of a prompt."""
    return prompt.rsplit(": ", 1)[1].split(", ")


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance_days(self, days: float) -> None:
        self.now += int(days * DAY_MS)


def fragment(html: str):
    """Parse markup and return its first element."""
    return BeautifulSoup(html, "html.parser").find(True)


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def article_url() -> str:
    return ARTICLE_URL


@pytest.fixture
def collaborator() -> FakeCollaborator:
    """Collaborator that simplifies "ubiquitous" and skips everything else."""
    return FakeCollaborator(answers={"ubiquitous": "everywhere"})


@pytest.fixture
def state() -> AnnotationState:
    return AnnotationState()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_collaborator():
    """Factory for collaborators with custom answers or failures."""
    return FakeCollaborator


@pytest.fixture
def parse():
    """Parse markup and return its first element."""
    return fragment


@pytest.fixture
def tiny_html() -> str:
    return TINY_HTML
