#!/usr/bin/env python3
"""
Basic FocusReader Usage Example

This example demonstrates the core workflow:
1. Extract the readable content of a page
2. Annotate it with vocabulary and concept hints
3. Apply emphasis reading and restore the original content
4. Record and resume reading progress
"""

import asyncio
from pathlib import Path

from focusreader import (
    AnnotationConfig,
    JSONFileStore,
    ProgressConfig,
    ReaderConfig,
    ReaderEngine,
)


class EchoCollaborator:
    """Stand-in for a real text-inference service.

    Swap in a client for your model of choice: anything with an async
    request(prompt, context) returning {"answer": ...} or {"error": ...}.
    """

    async def request(self, prompt: str, context: str) -> dict[str, str]:
        terms = prompt.rsplit(": ", 1)[1].split(", ")
        return {"answer": "\n".join(f"{term}:SKIP" for term in terms)}


async def main():
    html = Path("path/to/page.html").read_text(encoding="utf-8")
    url = "https://example.com/posts/ubiquitous-computing"

    # ─────────────────────────────────────────────────────────────────────────
    # 1. Extraction
    # ─────────────────────────────────────────────────────────────────────────

    engine = ReaderEngine(
        EchoCollaborator(),
        JSONFileStore(Path("~/.focusreader/progress.json").expanduser()),
    )

    doc = engine.extract(html, url)
    if doc is None:
        print("No readable content on this page")
        return

    print(f"Extracted: {doc.title} ({doc.site_name})")
    print(f"  By: {doc.author or 'unknown'}, {doc.publish_date_label or 'undated'}")
    print(f"  {doc.word_count:,} words, {doc.reading_time_label}")
    for heading in doc.headings:
        print(f"  {'  ' * (heading.level - 1)}{heading.text} -> #{heading.anchor_id}")

    # ─────────────────────────────────────────────────────────────────────────
    # 2. Annotation
    # ─────────────────────────────────────────────────────────────────────────

    result = await engine.annotate("vocabulary")
    if result.error:
        print(f"Vocabulary hints unavailable: {result.error}")
    else:
        print(f"Simplified {result.occurrences_annotated} words")

    # A second call is a no-op until the content is restored
    assert (await engine.annotate("vocabulary")).skipped

    result = await engine.annotate("concept")
    print(f"Explained {len(result.resolved_terms)} concepts")

    # ─────────────────────────────────────────────────────────────────────────
    # 3. Emphasis reading and restore
    # ─────────────────────────────────────────────────────────────────────────

    engine.restore_content()  # Cache survives, flags reset
    engine.emphasize()
    print(str(engine.content)[:200])

    # ─────────────────────────────────────────────────────────────────────────
    # 4. Reading progress
    # ─────────────────────────────────────────────────────────────────────────

    # Scroll events from the host; only the last one in each window is saved
    for scroll_top in (120, 480, 600):
        engine.on_scroll(scroll_top, viewport_height=800, document_height=2000)
    await engine.close()

    record = await engine.check_progress()
    if record:
        print(f"Resume at {record.scroll_top:.0f}px ({record.progress_percent}%)")

    for entry in await engine.shelf():
        print(f"In progress: {entry.title} - {entry.progress_percent}% ({entry.hostname})")


def custom_configuration_example():
    """Tune batch sizes, expiry, and shelf behavior."""
    config = ReaderConfig(
        annotation=AnnotationConfig(
            vocabulary_batch_limit=20,  # Larger requests
            emphasis_ratio=0.5,  # Bold half of each word
        ),
        progress=ProgressConfig(
            expiry_days=14,  # Keep positions for two weeks
            clear_shelf_below_min=False,  # Keep shelf entries when scrolling back up
        ),
    )
    return ReaderEngine(EchoCollaborator(), config=config)


def isolate_selection_example():
    """Read just the selected text instead of the whole page."""
    engine = ReaderEngine(EchoCollaborator())
    doc = engine.isolate(
        "First selected paragraph.\n\nSecond selected paragraph.",
        "https://example.com/posts/1",
    )
    print(f"{doc.title}: {doc.word_count} words")


if __name__ == "__main__":
    # Note: main() reads a placeholder path.
    # Replace it with a saved HTML page to run.
    print("FocusReader Usage Examples")
    print("=" * 50)
    print("\nSee the code for detailed examples of:")
    print("  - Content extraction")
    print("  - Vocabulary and concept annotation")
    print("  - Emphasis reading and restore")
    print("  - Reading progress and the shelf")
    print("  - Custom configuration")
    print("  - Isolated selections")
    isolate_selection_example()
