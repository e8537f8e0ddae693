"""File discovery, frontmatter extraction, and markdown-it tokenization"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt

from mdblog.core.models import ParsedPost
from mdblog.core.utils.hashing import sha256
from mdblog.core.utils.slug import slug_from_stem


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)
OPENING_RE = re.compile(r'^---[ \t]*\r?\n')
MD_EXTENSIONS = {'.md', '.mdx', '.markdown'}


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, int]:
    """Return (frontmatter_dict, body, body_offset) with the YAML header removed.

    body_offset is the number of file lines consumed by the header.
    """
    text = text.lstrip('\ufeff')
    if not OPENING_RE.match(text):
        return {}, text, 0
    m = FRONTMATTER_RE.match(text)
    if m is None:
        raise ValueError("Unterminated frontmatter: no closing '---' line")
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    bad_keys = [k for k in fm if not isinstance(k, str)]
    if bad_keys:
        raise ValueError(f"Invalid YAML frontmatter: keys must be strings, got {bad_keys!r}")
    header = text[:m.end()]
    return fm, text[m.end():], header.count('\n')


def _hidden(path: Path, root: Path) -> bool:
    return any(part.startswith('.') for part in path.relative_to(root).parts)


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(
        p for p in path.rglob('*')
        if p.is_file() and p.suffix in MD_EXTENSIONS and not _hidden(p, path)
    )


def parse_file(path: Path, parser_config: str = 'gfm-like') -> ParsedPost:
    """Parse a single markdown file into a ParsedPost with token stream."""
    raw = path.read_text(encoding='utf-8')
    frontmatter, body, offset = split_frontmatter(raw)
    tokens = _make_parser(parser_config).parse(body)
    slug = str(frontmatter.get('slug') or slug_from_stem(path.stem))
    logger.debug("parsed %s: slug=%s tokens=%d", path, slug, len(tokens))
    return ParsedPost(
        path=path,
        slug=slug,
        raw_markdown=raw,
        markdown=body,
        body_offset=offset,
        hash=sha256(raw),
        frontmatter=frontmatter,
        tokens=tokens,
    )
