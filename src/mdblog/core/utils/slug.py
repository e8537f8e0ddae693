"""Slug generation for post identifiers and heading anchors"""

import re


DATE_PREFIX_RE = re.compile(r'^\d{4}-\d{2}-\d{2}-')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def slug_from_stem(stem: str) -> str:
    """Slugify a file stem, dropping a Jekyll-style YYYY-MM-DD- prefix."""
    return slugify(DATE_PREFIX_RE.sub('', stem)) or slugify(stem)
