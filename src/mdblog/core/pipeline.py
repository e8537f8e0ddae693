"""Pipeline step functions: check, extract, commit, and export orchestration"""

import logging
from datetime import date, datetime
from pathlib import Path

from sqlmodel import Session

from mdblog.config import Settings
from mdblog.core.export import write_index, write_post
from mdblog.core.extract.extract import extract_post, post_stats
from mdblog.core.models import Report, StagedPost, lenient_meta
from mdblog.core.parse import discover_files, parse_file
from mdblog.core.utils.slug import slugify
from mdblog.core.validate.validate import validate_corpus
from mdblog.crud.posts import commit_post, get_all_posts


logger = logging.getLogger(__name__)


def _process(staged: StagedPost) -> dict:
    """Derive the catalog fields (title, date, terms, stats) for a staged post."""
    meta = lenient_meta(staged.frontmatter)
    return {
        "slug": staged.slug,
        "path": staged.path,
        "markdown": staged.markdown,
        "hash": staged.hash,
        "frontmatter": staged.frontmatter,
        "title": meta.title,
        "date": meta.naive_date,
        "draft": meta.draft,
        "categories": meta.categories,
        "tags": meta.tags,
        "stats": post_stats(staged),
    }


def run_check(path: str, settings: Settings, today: date = None) -> Report:
    """Validate every post under path."""
    return validate_corpus(Path(path), settings, today)


def run_extract(
    path: str,
    parser_config: str,
    staging_dir: Path,
    ) -> list[tuple[Path, Path]]:
    """Parse path and write StagedPost JSON to staging_dir. Returns (source_path, staging_file) pairs.

    Files left over from a previous extract are removed first.
    """
    staging_dir.mkdir(parents=True, exist_ok=True)
    for old in staging_dir.glob('*.json'):
        old.unlink()
    results = []
    written: dict[Path, Path] = {}
    for p in discover_files(Path(path)):
        try:
            parsed = parse_file(p, parser_config)
            if not parsed.slug or parsed.slug != slugify(parsed.slug):
                raise ValueError(f"slug '{parsed.slug}' is not URL-safe")
            out_file = staging_dir / f"{parsed.slug}.json"
            if out_file in written:
                raise ValueError(f"duplicate slug '{parsed.slug}', already used by {written[out_file]}")
            staged = extract_post(parsed)
            out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
        except Exception as e:
            raise RuntimeError(f"Failed to extract {p}: {e}") from e
        written[out_file] = p
        results.append((p, out_file))
        logger.debug("staged %s -> %s", p, out_file)
    return results


def run_commit(
    engine,
    max_versions: int,
    staging_dir: Path,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Read staged StagedPost JSON, process, and commit to the database.

    Returns (counts, changes) where changes is a list of (status, slug) for
    created/updated posts. Returns ({}, []) when staging_dir is empty.
    """
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    if not files:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for f in files:
            staged = StagedPost.model_validate_json(f.read_text(encoding='utf-8'))
            post, status = commit_post(session, _process(staged), max_versions, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, post.slug))
        session.commit()
    logger.info("commit: %s", counts)
    return counts, changes


def run_export(
    session: Session,
    posts: list,
    output_dir: Path,
    fmt: str,
    content_root: Path | None = None,
    ) -> list[tuple[str, Path]]:
    """Write posts plus a full-catalog index.json to output_dir. Returns (slug, md_path) pairs."""
    results = []
    for post in posts:
        md_path, _ = write_post(post, session, output_dir, fmt, content_root)
        results.append((post.slug, md_path))
    write_index(session, get_all_posts(session), output_dir)
    return results
