"""Markdown to HTML for assistant turns, tolerant of half-streamed text.

A reply is re-rendered after every fragment, so the text often stops in the
middle of a construct: an open code fence, a dangling ``**``. ``balance``
closes those before conversion so the partial reply renders the way the
finished one will.

Supports: headings, bold, italic, inline code, code blocks, links, lists.
"""

import html
import re

_FENCE = "```"
_CODE_BLOCK = re.compile(r"```(\w*)\n?([\s\S]*?)```")
_PLACEHOLDER = "\x00CODE{}\x00"
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_SAFE_SCHEMES = ("http://", "https://", "mailto:")


def balance(text: str) -> str:
    """Close constructs left open by a partial stream."""
    if text.count(_FENCE) % 2:
        return text + ("" if text.endswith("\n") else "\n") + _FENCE
    # Outside code, an odd number of bold markers means the last one is open.
    prose = _CODE_BLOCK.sub("", text)
    if prose.count("**") % 2:
        text += "**"
    if re.sub(r"`[^`]*`", "", prose).count("`") % 2:
        text += "`"
    return text


def _render_lists(text: str, pattern: str, tag: str, css: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(pattern, stripped):
            if not in_list:
                result.append(f'<{tag} class="{css}">')
                in_list = True
            result.append(f"<li>{re.sub(pattern, '', stripped)}</li>")
        else:
            if in_list:
                result.append(f"</{tag}>")
                in_list = False
            result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def _link(match: re.Match[str]) -> str:
    """Anchor for an http(s) or mailto target; any other target keeps only its label."""
    label, url = match.groups()
    if not url.lower().startswith(_SAFE_SCHEMES):
        return label
    return f'<a href="{url}" class="text-blue-600 underline" target="_blank" rel="noopener">{label}</a>'


def markdown_to_html(text: str) -> str:
    """Convert (possibly partial) markdown to HTML for chat display."""
    text = html.escape(balance(text))

    # Pull code blocks out first so inline rules never touch their content.
    blocks: list[str] = []

    def stash(match: re.Match[str]) -> str:
        blocks.append(
            '<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
            f"<code>{match.group(2)}</code></pre>"
        )
        return _PLACEHOLDER.format(len(blocks) - 1)

    text = _CODE_BLOCK.sub(stash, text)

    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    # Headings (# through ###)
    text = re.sub(
        r"^(#{1,3})\s+(.+)$",
        lambda m: f'<div class="font-semibold text-base my-1">{m.group(2)}</div>',
        text,
        flags=re.MULTILINE,
    )

    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)
    text = re.sub(r"(?<![\w*])\*([^*\n]+)\*(?![\w*])", r"<em>\1</em>", text)
    text = re.sub(r"(?<!\w)_([^_\n]+)_(?!\w)", r"<em>\1</em>", text)

    text = _LINK.sub(_link, text)

    text = _render_lists(text, r"^[-*]\s+", "ul", "list-disc list-inside my-2 space-y-1")
    text = _render_lists(text, r"^\d+\.\s+", "ol", "list-decimal list-inside my-2 space-y-1")

    text = text.replace("\n", "<br>")

    for index, block in enumerate(blocks):
        text = text.replace(_PLACEHOLDER.format(index), block)
    return text


def plain_to_html(text: str) -> str:
    """Escape user text and keep its line breaks."""
    return html.escape(text, quote=False).replace("\n", "<br>")
