"""Tag and category links for a post, kept in front matter order"""

from uuid import UUID

from sqlmodel import Session, select

from mdblog.crud.models import Category, PostCategory, PostTag, Tag


def post_terms(session: Session, post_id: UUID) -> tuple[list[str], list[str]]:
    """Return (categories, tags) for a post in front matter order."""
    cats = session.exec(
        select(PostCategory.category_name).where(PostCategory.post_id == post_id).order_by(PostCategory.position)
    ).all()
    tags = session.exec(
        select(PostTag.tag_name).where(PostTag.post_id == post_id).order_by(PostTag.position)
    ).all()
    return list(cats), list(tags)


def replace_terms(session: Session, post_id: UUID, categories: list[str], tags: list[str]) -> None:
    """Drop the post's category/tag links and link the given names instead."""
    for row in session.exec(select(PostTag).where(PostTag.post_id == post_id)).all():
        session.delete(row)
    for row in session.exec(select(PostCategory).where(PostCategory.post_id == post_id)).all():
        session.delete(row)
    session.flush()

    for position, name in enumerate(dict.fromkeys(categories)):
        if not session.get(Category, name):
            session.add(Category(name=name))
            session.flush()
        session.add(PostCategory(post_id=post_id, category_name=name, position=position))

    for position, name in enumerate(dict.fromkeys(tags)):
        if not session.get(Tag, name):
            session.add(Tag(name=name))
            session.flush()
        session.add(PostTag(post_id=post_id, tag_name=name, position=position))

    session.flush()
