"""Token-to-block conversion using source line positions"""

import re

from mdblog.core.models import BlockType, ExtractedBlock
from mdblog.core.utils.tokens import heading_level


BLOCK_TYPE_MAP: dict[str, BlockType] = {
    'heading_open':      BlockType.heading,
    'bullet_list_open':  BlockType.list,
    'ordered_list_open': BlockType.list,
    'fence':             BlockType.code,
    'code_block':        BlockType.code,
    'table_open':        BlockType.table,
    'html_block':        BlockType.html,
    'blockquote_open':   BlockType.quote,
}

CODE_TOKENS = {'fence', 'code_block'}
FOOTER_TYPES = {BlockType.paragraph, BlockType.list}
MATH_ENV_RE = re.compile(r'^\\begin\{([^}]+)\}.*\\end\{\1\}$', re.DOTALL)
QUOTE_PREFIX_RE = re.compile(r'^[\s>]*')
BREAKS = ('softbreak', 'hardbreak')


def _is_display_math(content: str) -> bool:
    s = content.strip()
    if len(s) >= 4 and s.startswith('$$') and s.endswith('$$'):
        return True
    return bool(MATH_ENV_RE.match(s))


def _para_type(tokens: list, i: int, content: str) -> BlockType:
    """Paragraphs holding only display math are math; a lone image is a figure."""
    if _is_display_math(content):
        return BlockType.math
    inline = tokens[i + 1] if i + 1 < len(tokens) else None
    if inline is None or inline.type != 'inline':
        return BlockType.paragraph
    visible = [c for c in inline.children or [] if c.type not in BREAKS]
    if len(visible) == 1 and visible[0].type == 'image':
        return BlockType.figure
    return BlockType.paragraph


def _source_slice(token, source_lines: list[str]) -> str:
    if not token.map:
        return token.content.rstrip()
    first, last = token.map
    return ''.join(source_lines[first:last]).rstrip()


def _fence_closed(token, content: str) -> bool:
    """True when the fence source ends with a closing marker at least as long as the opener."""
    if token.type != 'fence':
        return True
    lines = content.splitlines()
    if len(lines) < 2:
        return False
    marker = token.markup[0]
    last = QUOTE_PREFIX_RE.sub('', lines[-1]).strip()
    return len(last) >= len(token.markup) and set(last) == {marker}


def _fence_lang(token) -> str | None:
    info = (token.info or '').strip()
    return info.split()[0].strip('{}').lower() if info else None


def tokens_to_blocks(tokens: list, source_lines: list[str]) -> list[ExtractedBlock]:
    """Convert a post's token list to typed ExtractedBlocks.

    Only top-level tokens become blocks, except code blocks which are also
    emitted when nested in lists or quotes.
    """
    blocks: list[ExtractedBlock] = []
    after_hr = False

    for i, tok in enumerate(tokens):
        if tok.level > 0 and tok.type not in CODE_TOKENS:
            continue
        if tok.type == 'hr':
            after_hr = True
            continue

        content = _source_slice(tok, source_lines)
        if tok.type == 'paragraph_open':
            block_type = _para_type(tokens, i, content)
        else:
            block_type = BLOCK_TYPE_MAP.get(tok.type)
            if block_type is None:
                continue

        if after_hr and block_type in FOOTER_TYPES:
            block_type = BlockType.footer
        blocks.append(ExtractedBlock(
            type=block_type,
            content=content,
            line=tok.map[0] + 1 if tok.map else 1,
            level=heading_level(tok),
            lang=_fence_lang(tok) if tok.type == 'fence' else None,
            closed=_fence_closed(tok, content),
        ))

    return blocks
