"""Export: normalized markdown, sidecar JSON, and the post index"""

import json
from pathlib import Path

import yaml
from sqlmodel import Session

from mdblog.crud.models import Post
from mdblog.crud.terms import post_terms


LEADING_KEYS = ("title", "date", "categories", "tags", "slug")


def build_frontmatter(post: Post, categories: list[str], tags: list[str]) -> dict:
    """Front matter in canonical key order: title, date, categories, tags, slug, then user keys."""
    fm = dict(post.frontmatter or {})
    out = {
        "title": post.title,
        "date": post.date.isoformat() if post.date else fm.get("date"),
        "categories": categories,
        "tags": tags,
        "slug": post.slug,
    }
    out.update({k: v for k, v in fm.items() if k not in LEADING_KEYS})
    return out


def build_markdown(post: Post, categories: list[str], tags: list[str]) -> str:
    """Return the post body with a normalized YAML front matter block prepended."""
    header = yaml.dump(
        build_frontmatter(post, categories, tags),
        default_flow_style=False, allow_unicode=True, sort_keys=False,
    )
    return f"---\n{header}---\n\n{post.markdown.lstrip()}"


def build_sidecar(post: Post, categories: list[str], tags: list[str]) -> dict:
    """Machine-readable metadata for one post."""
    return {
        "slug": post.slug,
        "path": post.path,
        "title": post.title,
        "date": post.date.isoformat() if post.date else None,
        "draft": post.draft,
        "categories": categories,
        "tags": tags,
        "committed_at": post.committed_at.isoformat() if post.committed_at else None,
        "frontmatter": post.frontmatter or {},
        "stats": post.stats or {},
    }


def _relative_parent(path: str, content_root: Path | None) -> Path:
    """Source directory below content_root; posts outside it keep their relative parent."""
    src = Path(path)
    if content_root is not None:
        try:
            return src.resolve().parent.relative_to(content_root.resolve())
        except ValueError:
            pass
    return Path(*[p for p in src.parent.parts if p not in (src.anchor, '..')])


def write_post(
    post: Post,
    session: Session,
    output_dir: Path,
    fmt: str = 'md',
    content_root: Path | None = None,
    ) -> tuple[Path, Path]:
    """Write normalized MD/MDX + sidecar JSON for a single post.

    Output path mirrors the source directory below content_root:
      output_dir / <source parent> / post.slug.{fmt|json}

    Returns (md_path, json_path).
    """
    dest_dir = output_dir / _relative_parent(post.path, content_root)
    dest_dir.mkdir(parents=True, exist_ok=True)

    categories, tags = post_terms(session, post.id)
    md_path = dest_dir / f"{post.slug}.{fmt}"
    json_path = dest_dir / f"{post.slug}.json"

    md_path.write_text(build_markdown(post, categories, tags), encoding='utf-8')
    json_path.write_text(
        json.dumps(build_sidecar(post, categories, tags), indent=2, ensure_ascii=False),
        encoding='utf-8',
    )
    return md_path, json_path


def build_index(session: Session, posts: list[Post]) -> dict:
    """Index of published posts (newest first) plus tag and category maps to slugs."""
    published = sorted(
        (p for p in posts if not p.draft),
        key=lambda p: (p.date is not None, p.date, p.slug),
        reverse=True,
    )
    entries = []
    by_tag: dict[str, list[str]] = {}
    by_category: dict[str, list[str]] = {}
    for p in published:
        categories, tags = post_terms(session, p.id)
        entries.append({
            "slug": p.slug,
            "title": p.title,
            "date": p.date.isoformat() if p.date else None,
            "path": p.path,
            "categories": categories,
            "tags": tags,
            "reading_minutes": (p.stats or {}).get("reading_minutes"),
        })
        for t in tags:
            by_tag.setdefault(t, []).append(p.slug)
        for c in categories:
            by_category.setdefault(c, []).append(p.slug)
    return {
        "posts": entries,
        "tags": dict(sorted(by_tag.items())),
        "categories": dict(sorted(by_category.items())),
    }


def write_index(session: Session, posts: list[Post], output_dir: Path) -> Path:
    """Write index.json to output_dir and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    index_path = output_dir / "index.json"
    index_path.write_text(
        json.dumps(build_index(session, posts), indent=2, ensure_ascii=False), encoding='utf-8',
    )
    return index_path
