"""Tests for emphasis reading and the plan/apply rewrite passes."""

from focusreader.annotation import (
    EMPHASIS_FLAG,
    AnnotationState,
    Emphasizer,
    Guards,
    apply_rewrites,
    eligible_text_nodes,
    plan_emphasis,
)
from focusreader.annotation.rewrite import render_emphasis


class TestEmphasizer:
    """Test the bionic-word transformation."""

    def test_bolds_leading_part_of_each_word(self, parse):
        root = parse("<p>Hello world</p>")
        rewritten = Emphasizer(AnnotationState()).apply(root)

        assert rewritten == 1
        words = root.select("span.bionic-word")
        assert [w.strong.get_text() for w in words] == ["He", "wo"]
        assert [w.get_text() for w in words] == ["Hello", "world"]

    def test_whitespace_preserved(self, parse):
        root = parse("<p>one  two\nthree</p>")
        Emphasizer(AnnotationState()).apply(root)
        assert root.get_text() == "one  two\nthree"

    def test_single_letter_word(self, parse):
        root = parse("<p>a</p>")
        Emphasizer(AnnotationState()).apply(root)

        span = root.select_one("span.bionic-word")
        assert span.strong.get_text() == "a"
        assert len(span.contents) == 1

    def test_runs_once(self, parse):
        state = AnnotationState()
        root = parse("<p>Hello world</p>")
        emphasizer = Emphasizer(state)

        emphasizer.apply(root)
        html = str(root)

        assert emphasizer.apply(root) == 0
        assert str(root) == html
        assert state.is_applied(EMPHASIS_FLAG)

    def test_skips_code_and_strong(self, parse):
        root = parse("<div><pre><code>x = 1</code></pre><p><strong>Bold</strong> text</p></div>")
        rewritten = Emphasizer(AnnotationState()).apply(root)

        assert rewritten == 1
        assert root.pre.get_text() == "x = 1"
        assert root.p.strong.get_text() == "Bold"

    def test_custom_ratio(self, parse):
        root = parse("<p>abcdefghij</p>")
        Emphasizer(AnnotationState(), ratio=0.5).apply(root)
        assert root.select_one("span.bionic-word strong").get_text() == "abcde"


class TestRewritePasses:
    """Test that planning never mutates and applying skips detached nodes."""

    def test_plan_does_not_mutate(self, parse):
        root = parse("<p>Hello world</p>")
        guards = Guards(classes=frozenset(), tags=frozenset())
        before = str(root)

        ops = plan_emphasis(eligible_text_nodes(root, guards), 0.4)

        assert len(ops) == 1
        assert ops[0].occurrences == 2
        assert str(root) == before

    def test_detached_targets_skipped(self, parse):
        root = parse("<div><p>Hello</p><p>world</p></div>")
        guards = Guards(classes=frozenset(), tags=frozenset())
        ops = plan_emphasis(eligible_text_nodes(root, guards), 0.4)

        root.find_all("p")[1].string.extract()

        assert apply_rewrites(ops, render_emphasis) == 1

    def test_guards_by_class(self, parse):
        root = parse('<div><span class="vocab-word">ubiquitous</span><p>plain</p></div>')
        guards = Guards(classes=frozenset({"vocab-word"}), tags=frozenset())

        nodes = eligible_text_nodes(root, guards)
        assert [str(n) for n in nodes] == ["plain"]
