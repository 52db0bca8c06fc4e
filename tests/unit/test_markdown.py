"""Unit tests for markdown rendering of streamed replies."""

import pytest

from openrouter_chat.ui.markdown import balance, markdown_to_html, plain_to_html


class TestBalance:
    """Tests for closing constructs left open mid-stream."""

    @pytest.mark.parametrize(
        ("partial", "expected"),
        [
            ("```python\nx = 1", "```python\nx = 1\n```"),
            ("```python\nx = 1\n", "```python\nx = 1\n```"),
            ("this is **bo", "this is **bo**"),
            ("run `pip ins", "run `pip ins`"),
            ("**done** and **more", "**done** and **more**"),
        ],
    )
    def test_open_constructs_closed(self, partial: str, expected: str) -> None:
        assert balance(partial) == expected

    def test_complete_text_unchanged(self) -> None:
        text = "**bold** and `code`\n```\nblock\n```"

        assert balance(text) == text


class TestMarkdownToHtml:
    """Tests for markdown_to_html."""

    def test_escapes_html(self) -> None:
        assert "&lt;script&gt;" in markdown_to_html("<script>alert(1)</script>")

    def test_partial_bold_renders_as_bold(self) -> None:
        assert markdown_to_html("**Hel") == "<strong>Hel</strong>"

    def test_partial_code_block_renders_as_block(self) -> None:
        html = markdown_to_html("```\nprint('**not bold**')")

        assert html.startswith("<pre")
        assert "<strong>" not in html
        assert "print(&#x27;" in html or "print('" in html

    def test_lists(self) -> None:
        html = markdown_to_html("- one\n- two\n\n1. first\n2. second")

        assert '<ul class="list-disc' in html
        assert "<li>one</li>" in html
        assert '<ol class="list-decimal' in html
        assert "<li>second</li>" in html

    def test_links_and_headings(self) -> None:
        html = markdown_to_html("# Title\nsee [docs](https://example.com)")

        assert "Title</div>" in html
        assert '<a href="https://example.com"' in html

    def test_quote_cannot_leave_href(self) -> None:
        html = markdown_to_html('[a](https://x"onclick=alert(1)//)')

        assert '"onclick' not in html
        assert "&quot;onclick" in html

    @pytest.mark.parametrize(
        "target",
        ["javascript:alert(document.cookie)", "JavaScript:alert(1)", "data:text/html,x", "/relative"],
    )
    def test_unsafe_link_targets_render_label_only(self, target: str) -> None:
        html = markdown_to_html(f"[click]({target})")

        assert "<a " not in html
        assert html.startswith("click")

    def test_mailto_link_allowed(self) -> None:
        assert '<a href="mailto:me@example.com"' in markdown_to_html("[mail](mailto:me@example.com)")

    def test_code_block_keeps_newlines(self) -> None:
        html = markdown_to_html("```\na\nb\n```")

        assert "<code>a\nb\n</code>" in html


def test_plain_to_html_escapes_and_breaks_lines() -> None:
    assert plain_to_html("a < b\nc") == "a &lt; b<br>c"
