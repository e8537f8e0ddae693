"""Post history: immutable snapshots of earlier bodies and front matter"""

import json
from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from mdblog.crud.models import Post, PostVersion
from mdblog.crud.terms import replace_terms
from mdblog.core.models import lenient_meta
from mdblog.core.utils.diff import unified_diff


def get_version(session: Session, post_id: UUID, version_num: int) -> PostVersion:
    """Raises ValueError when the post has no such version."""
    stmt = select(PostVersion).where(
        PostVersion.post_id == post_id,
        PostVersion.version_num == version_num,
    )
    found = session.exec(stmt).one_or_none()
    if found is None:
        raise ValueError(f"Version {version_num} not found for post {post_id}")
    return found


def list_versions(session: Session, post_id: UUID) -> list[PostVersion]:
    """Oldest first."""
    stmt = select(PostVersion).where(PostVersion.post_id == post_id).order_by(PostVersion.version_num)
    return list(session.exec(stmt).all())


def diff_versions(session: Session, post_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    old = get_version(session, post_id, from_num)
    new = get_version(session, post_id, to_num)
    return unified_diff(old.markdown, new.markdown, f"v{from_num}", f"v{to_num}", context)


def diff_current(session: Session, post: Post, from_num: int, context: int = 3) -> list[str]:
    """Diff a stored version against the body currently in the catalog."""
    old = get_version(session, post.id, from_num)
    return unified_diff(old.markdown, post.markdown, f"v{from_num}", "current", context)


def prune_versions(session: Session, post_id: UUID, max_versions: int) -> int:
    """Keep only the newest max_versions snapshots and return how many were dropped.

    max_versions=0 means unlimited history.
    """
    if not max_versions:
        return 0
    stale = list_versions(session, post_id)[:-max_versions]
    for version in stale:
        session.delete(version)
    if stale:
        session.flush()
    return len(stale)


def save_version(session: Session, post: Post, max_versions: int = 10) -> PostVersion:
    """Snapshot the post as it is now under the next version number, then prune."""
    latest = session.exec(
        select(func.max(PostVersion.version_num)).where(PostVersion.post_id == post.id)
    ).one()
    frontmatter = None
    if post.frontmatter is not None:
        frontmatter = json.dumps(post.frontmatter, default=str)

    snapshot = PostVersion(
        post_id=post.id,
        version_num=(latest or 0) + 1,
        markdown=post.markdown,
        hash=post.hash,
        frontmatter=frontmatter,
        stats=post.stats,
    )
    session.add(snapshot)
    session.flush()
    prune_versions(session, post.id, max_versions)
    return snapshot


def revert_to_version(session: Session, post: Post, version_num: int, max_versions: int = 10) -> Post:
    """Restore an earlier snapshot as the post's current content.

    The state being replaced is saved as a new version first, so a revert can
    itself be reverted. Title, date, draft flag and term links are derived from
    the restored front matter the same way a commit derives them. Only the
    catalog changes; the source file is left alone. Flushes without committing.
    """
    target = get_version(session, post.id, version_num)
    save_version(session, post, max_versions=max_versions)

    restored = json.loads(target.frontmatter) if target.frontmatter else None
    meta = lenient_meta(restored)
    post.markdown = target.markdown
    post.hash = target.hash
    post.frontmatter = restored
    post.title = meta.title
    post.date = meta.naive_date
    post.draft = meta.draft
    post.stats = target.stats
    post.updated_at = datetime.now()
    session.add(post)
    session.flush()
    replace_terms(session, post.id, meta.categories, meta.tags)
    return post
