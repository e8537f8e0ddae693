"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdblog.config import Settings, load_config
from mdblog.core.models import Report
from mdblog.core.pipeline import run_check, run_commit, run_export, run_extract
from mdblog.crud.database import init_db, make_engine, reset_db
from mdblog.crud.models import Post
from mdblog.crud.posts import (
    get_all_posts,
    get_by_category,
    get_by_slug,
    get_by_tag,
    get_last_committed,
    list_categories,
    list_tags,
)
from mdblog.crud.versioning import diff_current, diff_versions, list_versions, revert_to_version


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _content_path(path: Optional[str], settings: Settings) -> str:
    """Resolve the PATH argument, defaulting to the configured content directory."""
    target = path or settings.content_dir
    if not Path(target).exists():
        _fail(f"Path not found: {target}")
    return target


def _echo_report(report: Report, fmt: str) -> None:
    if fmt == "json":
        typer.echo(json.dumps({
            "files": report.files,
            "errors": report.errors,
            "warnings": report.warnings,
            "issues": [i.model_dump(mode="json") for i in report.issues],
        }, indent=2))
        return
    for issue in report.issues:
        typer.echo(str(issue))
    typer.echo(f"Checked {report.files} file(s): {report.errors} error(s), {report.warnings} warning(s)")


def _echo_commit(counts: dict, changes: list) -> None:
    """Print per-post commit status and a summary line."""
    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def _echo_posts(posts: list[Post]) -> None:
    for p in posts:
        day = p.date.date().isoformat() if p.date else "----------"
        draft = " (draft)" if p.draft else ""
        typer.echo(f"{day}  {p.slug}  {p.title or ''}{draft}")


def _export(engine, settings: Settings, posts_from) -> None:
    """Run export for the posts returned by posts_from(session)."""
    output_dir = Path(settings.output_dir)
    try:
        with Session(engine) as session:
            posts = posts_from(session)
            results = run_export(
                session, posts, output_dir, settings.output_format, Path(settings.content_dir),
            )
    except Exception as e:
        _fail("Export failed", e)
    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} post(s) to {output_dir}/")


def _post_or_fail(session: Session, slug: str) -> Post:
    post = get_by_slug(session, slug)
    if post is None:
        _fail(f"No post with slug '{slug}'")
    return post


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def check_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to check")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as failures")] = False,
    fmt: Annotated[str, typer.Option("--format", help="text or json")] = "text",
    static: Annotated[Optional[str], typer.Option("--static-dir", help="Root for /-rooted link targets")] = None,
    ):
    """Validate front matter, math, code fences, and local links/images."""
    if fmt not in ("text", "json"):
        _fail(f"Unknown format '{fmt}', expected text or json")
    settings = _settings(overrides={"static_dir": static})
    report = run_check(_content_path(path, settings), settings)
    _echo_report(report, fmt)
    if not report.ok or (strict and report.warnings):
        raise typer.Exit(1)


def extract_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to extract from")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Extract front matter, typed blocks, and references into the staging directory."""
    settings = _settings(overrides={"staging_dir": staging, "parser_config": parser})
    staging_dir = Path(settings.staging_dir)
    try:
        results = run_extract(_content_path(path, settings), settings.parser_config, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Extracted {len(results)} post(s) to {staging_dir}/")


def commit_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    ):
    """Upsert staged posts into the database."""
    settings = _settings(overrides={"staging_dir": staging, "max_versions": versions})
    engine = _engine(settings)

    try:
        counts, changes = run_commit(engine, settings.max_versions, Path(settings.staging_dir))
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'mdblog extract <path>' first.")
        raise typer.Exit(1)

    _echo_commit(counts, changes)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Export posts with this tag")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Export posts in this category")] = None,
    all_posts: Annotated[bool, typer.Option("--all", help="Export all posts in the database")] = False,
    ):
    """Write normalized posts, sidecar JSON, and index.json to the output dir."""
    settings = _settings(overrides={"output_dir": out})
    engine = _engine(settings)

    if all_posts:
        posts_from, scope = get_all_posts, "all"
    elif tag:
        posts_from, scope = (lambda s: get_by_tag(s, tag)), f"tag '{tag}'"
    elif category:
        posts_from, scope = (lambda s: get_by_category(s, category)), f"category '{category}'"
    else:
        posts_from, scope = get_last_committed, "last commit"

    with Session(engine) as session:
        found = bool(posts_from(session))
    if not found:
        typer.echo(f"No posts found for scope: {scope}.")
        raise typer.Exit(1)

    _export(engine, settings, posts_from)


def build_cmd(
    path: Annotated[Optional[str], typer.Argument(help="File or directory to process")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per post")] = None,
    force: Annotated[bool, typer.Option("--force", help="Continue even when validation finds errors")] = False,
    ):
    """Run the full pipeline: check -> extract -> commit -> export."""
    settings = _settings(overrides={
        "output_dir": out, "staging_dir": staging, "max_versions": versions,
    })
    target = _content_path(path, settings)

    # --- check ---
    report = run_check(target, settings)
    _echo_report(report, "text")
    if not report.ok and not force:
        _fail("Validation failed; fix the errors above or pass --force")

    engine = _engine(settings)
    staging_dir = Path(settings.staging_dir)

    # --- extract ---
    try:
        extracted = run_extract(target, settings.parser_config, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    typer.echo(f"Extracted {len(extracted)} post(s) to {staging_dir}/")

    # --- commit ---
    try:
        counts, changes = run_commit(engine, settings.max_versions, staging_dir)
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("No posts found.")
        raise typer.Exit(0)
    _echo_commit(counts, changes)

    # --- export ---
    _export(engine, settings, get_last_committed)


def list_cmd(
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only posts with this tag")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Only posts in this category")] = None,
    drafts: Annotated[bool, typer.Option("--drafts/--no-drafts", help="Include draft posts")] = True,
    ):
    """List cataloged posts, newest first."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        if tag:
            posts = get_by_tag(session, tag)
        elif category:
            posts = get_by_category(session, category)
        else:
            posts = get_all_posts(session)
        if not drafts:
            posts = [p for p in posts if not p.draft]
        if not posts:
            typer.echo("No posts found in database.")
            raise typer.Exit(1)
        _echo_posts(posts)


def tags_cmd():
    """List tags with their post counts."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        rows = list_tags(session)
    if not rows:
        typer.echo("No tags found in database.")
        raise typer.Exit(1)
    for name, count in rows:
        typer.echo(f"{name} ({count})")


def categories_cmd():
    """List categories with their post counts."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        rows = list_categories(session)
    if not rows:
        typer.echo("No categories found in database.")
        raise typer.Exit(1)
    for name, count in rows:
        typer.echo(f"{name} ({count})")


def history_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    ):
    """List stored versions of a post."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        post = _post_or_fail(session, slug)
        versions = list_versions(session, post.id)
        if not versions:
            typer.echo(f"No stored versions for '{slug}'.")
            return
        for v in versions:
            typer.echo(f"v{v.version_num}  {v.created_at.isoformat(timespec='seconds')}  {v.hash[:12]}")


def diff_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    from_num: Annotated[int, typer.Argument(help="Version to diff from")],
    to_num: Annotated[Optional[int], typer.Argument(help="Version to diff to; omit for the current body")] = None,
    context: Annotated[int, typer.Option("--context", "-U", help="Lines of context")] = 3,
    ):
    """Show a unified diff between two versions, or a version and the current body."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        post = _post_or_fail(session, slug)
        try:
            if to_num is None:
                lines = diff_current(session, post, from_num, context)
            else:
                lines = diff_versions(session, post.id, from_num, to_num, context)
        except ValueError as e:
            _fail(str(e))
    if not lines:
        typer.echo("No differences.")
        return
    typer.echo("".join(lines), nl=False)


def revert_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    version_num: Annotated[int, typer.Argument(help="Version number to restore")],
    ):
    """Restore a stored version as the current catalog entry (the source file is not touched)."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        post = _post_or_fail(session, slug)
        try:
            revert_to_version(session, post, version_num, settings.max_versions)
        except ValueError as e:
            _fail(str(e))
        session.commit()
    typer.echo(f"Reverted '{slug}' to v{version_num}.")
