"""Flatten Notion page objects and blocks into Markdown-like text lines."""

from typing import Optional

# Blocks whose children are separate pages, never inlined into the parent
OPAQUE_BLOCK_TYPES = {"child_page", "child_database"}

_HEADING_PREFIX = {"heading_1": "# ", "heading_2": "## ", "heading_3": "### "}


def plain_text(rich_text: Optional[list]) -> str:
    """Concatenate the plain_text of a rich_text array."""
    if not rich_text:
        return ""
    return "".join(part.get("plain_text", "") for part in rich_text)


def extract_title(page: dict) -> str:
    """Page title from its title property, else emoji icon, else 'Untitled'."""
    for prop in (page.get("properties") or {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            title = plain_text(prop.get("title"))
            if title:
                return title
            break
    icon = page.get("icon") or {}
    if icon.get("type") == "emoji" and icon.get("emoji"):
        return f"{icon['emoji']} Page"
    return "Untitled"


def render_block(block: dict, depth: int = 0, number: int = 1) -> Optional[str]:
    """Render one block as a single line (or fenced code) of text.

    Returns None for blocks with nothing to show. ``number`` is the
    position within a run of numbered list items.
    """
    block_type = block.get("type", "")
    data = block.get(block_type) or {}
    indent = "  " * depth
    text = plain_text(data.get("rich_text"))

    if block_type == "paragraph":
        line = text
    elif block_type in _HEADING_PREFIX:
        line = _HEADING_PREFIX[block_type] + text
    elif block_type == "bulleted_list_item":
        line = f"- {text}"
    elif block_type == "numbered_list_item":
        line = f"{number}. {text}"
    elif block_type == "to_do":
        line = f"- [{'x' if data.get('checked') else ' '}] {text}"
    elif block_type == "toggle":
        line = f"- {text}"
    elif block_type == "quote":
        line = f"> {text}"
    elif block_type == "callout":
        emoji = (data.get("icon") or {}).get("emoji")
        line = f"> {emoji} {text}" if emoji else f"> {text}"
    elif block_type == "code":
        language = data.get("language") or ""
        body = "\n".join(indent + code_line for code_line in text.splitlines())
        return f"{indent}```{language}\n{body}\n{indent}```"
    elif block_type == "equation":
        line = f"$$ {data.get('expression', '')} $$"
    elif block_type == "divider":
        line = "---"
    elif block_type == "table_row":
        cells = [plain_text(cell) for cell in data.get("cells") or []]
        line = "| " + " | ".join(cells) + " |"
    elif block_type == "child_page":
        line = f"[Subpage: {data.get('title') or 'Untitled'}]"
    elif block_type == "child_database":
        line = f"[Database: {data.get('title') or 'Untitled'}]"
    elif block_type in ("bookmark", "embed", "link_preview"):
        url = data.get("url")
        caption = plain_text(data.get("caption"))
        if not url:
            return None
        line = f"[{caption}]({url})" if caption else url
    elif block_type in ("image", "file", "pdf", "video"):
        source = data.get(data.get("type", "")) or {}
        url = source.get("url")
        caption = plain_text(data.get("caption")) or block_type
        if not url:
            return None
        line = f"[{caption}]({url})"
    else:
        # table, column_list, synced_block and friends only carry children
        line = text

    if not line.strip():
        return None
    return indent + line
