"""Link, image, and heading-anchor extraction from markdown-it tokens"""

import re

from mdblog.core.models import Reference
from mdblog.core.utils.slug import slugify
from mdblog.core.utils.tokens import inline_text


HTML_REF_RE = re.compile(r'<(img|a)\b[^>]*?\b(src|href)\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)


def _html_refs(html: str, line: int | None) -> list[Reference]:
    """Pull <img src> and <a href> targets out of raw HTML."""
    return [
        Reference(kind='image' if tag.lower() == 'img' else 'link', target=target, line=line)
        for tag, _, target in HTML_REF_RE.findall(html)
    ]


def extract_refs(tokens: list) -> list[Reference]:
    """Return every link and image target in document order."""
    refs: list[Reference] = []
    for tok in tokens:
        line = tok.map[0] + 1 if tok.map else None
        if tok.type == 'html_block':
            refs.extend(_html_refs(tok.content, line))
            continue
        if tok.type != 'inline' or not tok.children:
            continue
        for child in tok.children:
            if child.type == 'link_open':
                href = child.attrGet('href')
                if href:
                    refs.append(Reference(kind='link', target=str(href), line=line))
            elif child.type == 'image':
                src = child.attrGet('src')
                if src:
                    refs.append(Reference(kind='image', target=str(src), line=line))
            elif child.type == 'html_inline':
                refs.extend(_html_refs(child.content, line))
    return refs


def heading_anchors(tokens: list) -> set[str]:
    """Return the slugified ids of all headings, with -1, -2... suffixes for repeats."""
    anchors: set[str] = set()
    seen: dict[str, int] = {}
    for i, tok in enumerate(tokens):
        if tok.type != 'heading_open' or i + 1 >= len(tokens):
            continue
        base = slugify(inline_text(tokens[i + 1]))
        n = seen.get(base, 0)
        anchors.add(base if n == 0 else f"{base}-{n}")
        seen[base] = n + 1
    return anchors
