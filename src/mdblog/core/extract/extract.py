"""Convert a ParsedPost into a StagedPost and derive content statistics"""

import math
import re

from mdblog.core.extract.blocks import tokens_to_blocks
from mdblog.core.extract.refs import extract_refs
from mdblog.core.models import BlockType, ParsedPost, StagedPost


WORDS_PER_MINUTE = 200
PROSE_TYPES = {BlockType.heading, BlockType.paragraph, BlockType.list,
               BlockType.quote, BlockType.table, BlockType.footer}

INLINE_MATH_RE = re.compile(r'\$[^$\n]+\$')
WORD_RE = re.compile(r'[\w\'’-]+')


def extract_post(parsed: ParsedPost) -> StagedPost:
    """Convert a ParsedPost into typed blocks and references."""
    source_lines = parsed.markdown.splitlines(keepends=True)
    return StagedPost(
        slug=parsed.slug,
        path=str(parsed.path),
        markdown=parsed.markdown,
        hash=parsed.hash,
        frontmatter=parsed.frontmatter,
        blocks=tokens_to_blocks(parsed.tokens, source_lines),
        refs=extract_refs(parsed.tokens),
    )


def _prose_words(content: str) -> int:
    return len(WORD_RE.findall(INLINE_MATH_RE.sub(' ', content)))


def post_stats(staged: StagedPost) -> dict:
    """Word count, block counts, fence languages, and reading time for a post."""
    words = sum(_prose_words(b.content) for b in staged.blocks if b.type in PROSE_TYPES)
    code = [b for b in staged.blocks if b.type == BlockType.code]
    return {
        "words": words,
        "code_blocks": len(code),
        "math_blocks": sum(1 for b in staged.blocks if b.type == BlockType.math),
        "images": sum(1 for r in staged.refs if r.kind == 'image'),
        "links": sum(1 for r in staged.refs if r.kind == 'link'),
        "languages": sorted({b.lang for b in code if b.lang}),
        "reading_minutes": max(1, math.ceil(words / WORDS_PER_MINUTE)),
    }
