"""Post persistence: upsert, term replacement, and catalog queries"""

from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from mdblog.crud.models import Post, PostCategory, PostTag
from mdblog.crud.terms import replace_terms
from mdblog.crud.versioning import save_version


def get_by_path(session: Session, path: str) -> Post | None:
    """Return the Post with the given source path, or None if not found."""
    return session.exec(select(Post).where(Post.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> Post | None:
    """Return the first Post with the given slug, or None if not found."""
    return session.exec(select(Post).where(Post.slug == slug)).first()


def _newest_first(stmt):
    return stmt.order_by(Post.date.desc(), Post.slug.asc())


def get_all_posts(session: Session, include_drafts: bool = True) -> list[Post]:
    """Return all posts, newest first."""
    stmt = select(Post)
    if not include_drafts:
        stmt = stmt.where(Post.draft == False)  # noqa: E712
    return list(session.exec(_newest_first(stmt)).all())


def get_last_committed(session: Session) -> list[Post]:
    """Return posts from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Post.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(_newest_first(select(Post).where(Post.committed_at == max_ts))).all())


def get_by_tag(session: Session, tag: str) -> list[Post]:
    """Return posts carrying the given tag, newest first."""
    stmt = select(Post).join(PostTag, PostTag.post_id == Post.id).where(PostTag.tag_name == tag)
    return list(session.exec(_newest_first(stmt)).all())


def get_by_category(session: Session, category: str) -> list[Post]:
    """Return posts filed under the given category, newest first."""
    stmt = (
        select(Post)
        .join(PostCategory, PostCategory.post_id == Post.id)
        .where(PostCategory.category_name == category)
    )
    return list(session.exec(_newest_first(stmt)).all())


def list_tags(session: Session) -> list[tuple[str, int]]:
    """Return (tag, post_count) pairs sorted by tag name; unused tags are omitted."""
    stmt = (
        select(PostTag.tag_name, func.count(PostTag.post_id))
        .group_by(PostTag.tag_name)
        .order_by(PostTag.tag_name)
    )
    return [(name, count) for name, count in session.exec(stmt).all()]


def list_categories(session: Session) -> list[tuple[str, int]]:
    """Return (category, post_count) pairs sorted by category name; unused categories are omitted."""
    stmt = (
        select(PostCategory.category_name, func.count(PostCategory.post_id))
        .group_by(PostCategory.category_name)
        .order_by(PostCategory.category_name)
    )
    return [(name, count) for name, count in session.exec(stmt).all()]


def _apply(post: Post, data: dict) -> None:
    post.slug = data['slug']
    post.path = data['path']
    post.title = data.get('title')
    post.date = data.get('date')
    post.draft = bool(data.get('draft', False))
    post.markdown = data['markdown']
    post.hash = data['hash']
    post.frontmatter = data.get('frontmatter') or None
    post.stats = data.get('stats') or None


def commit_post(
    session: Session,
    data: dict,
    max_versions: int = 10,
    committed_at: datetime | None = None,
    ) -> tuple[Post, str]:
    """Upsert a processed post dict.

    Returns (post, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; the caller controls the transaction.
    committed_at is set on created/updated posts only; unchanged posts are skipped.
    """
    post = get_by_path(session, data['path'])

    if post:
        if post.hash == data['hash']:
            return post, 'unchanged'
        save_version(session, post, max_versions)
        _apply(post, data)
        post.updated_at = datetime.now()
        post.committed_at = committed_at
        session.add(post)
        session.flush()
        replace_terms(session, post.id, data.get('categories', []), data.get('tags', []))
        return post, 'updated'

    post = Post(
        slug=data['slug'],
        path=data['path'],
        markdown=data['markdown'],
        hash=data['hash'],
        committed_at=committed_at,
    )
    _apply(post, data)
    session.add(post)
    session.flush()
    replace_terms(session, post.id, data.get('categories', []), data.get('tags', []))
    return post, 'created'
