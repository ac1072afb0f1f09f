from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.core.errors import NotFound
from app.core.permissions import (
    Requester,
    VisibilityFilter,
    apply_edit,
    apply_soft_delete,
    authorize_mutation,
    visibility_for,
)
from app.crud.pagination import has_more, in_db_range, like_pattern, normalize_page
from app.db.models.comment import Comment
from app.db.models.post import Post
from app.db.models.user import User


def post_to_dict(post: Post, username: str, full_name: str, comment_count: int = 0) -> dict:
    return {
        "id": post.id,
        "user_id": post.user_id,
        "username": username,
        "full_name": full_name,
        "content": post.content,
        "deleted": post.deleted,
        "edited": post.edited,
        "edited_by_admin": post.edited_by_admin,
        "state": post.state,
        "comment_count": comment_count or 0,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def _comment_counts(db: Session, visibility: VisibilityFilter):
    # child comments are filtered on their own flag, whatever the post's state
    return visibility.apply(
        db.query(Comment.post_id, func.count(Comment.id).label("comment_count")),
        Comment,
    ).group_by(Comment.post_id).subquery()


def _post_query(db: Session, visibility: VisibilityFilter, search: Optional[str] = None):
    counts = _comment_counts(db, visibility)
    query = (
        db.query(
            Post,
            User.username,
            User.full_name,
            func.coalesce(counts.c.comment_count, 0).label("comment_count"),
        )
        .join(User, Post.user_id == User.id)
        .outerjoin(counts, counts.c.post_id == Post.id)
    )
    query = visibility.apply(query, Post)

    if search and search.strip():
        pattern = like_pattern(search.strip())
        query = query.filter(
            or_(
                Post.content.ilike(pattern, escape="\\"),
                User.username.ilike(pattern, escape="\\"),
            )
        )
    return query


def list_posts(db: Session, visibility: VisibilityFilter, limit=None, offset=None, search: Optional[str] = None) -> dict:
    """One page of the timeline, newest first.

    ``total`` is counted from the same filtered query as ``items`` so the two
    can never disagree about what the requester is allowed to see.
    """
    limit, offset = normalize_page(limit, offset)
    query = _post_query(db, visibility, search)

    total = query.count()
    rows = (
        query.order_by(Post.created_at.desc(), Post.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    items = [post_to_dict(*row) for row in rows]
    return {
        "items": items,
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": has_more(offset, len(items), total),
    }


def get_post(db: Session, post_id: int, visibility: VisibilityFilter) -> Post:
    if not in_db_range(post_id):
        raise NotFound("Post not found")
    post = visibility.apply(db.query(Post).filter(Post.id == post_id), Post).first()
    if not post:
        # deleted rows look exactly like missing ones to non-admins
        raise NotFound("Post not found")
    return post


def get_post_out(db: Session, post_id: int, visibility: VisibilityFilter) -> dict:
    if not in_db_range(post_id):
        raise NotFound("Post not found")
    row = _post_query(db, visibility).filter(Post.id == post_id).first()
    if not row:
        raise NotFound("Post not found")
    return post_to_dict(*row)


def create_post(db: Session, requester: Requester, content: str) -> dict:
    new_post = Post(user_id=requester.user_id, content=content)
    db.add(new_post)
    db.commit()
    db.refresh(new_post)
    return get_post_out(db, new_post.id, visibility_for(requester))


def update_post(db: Session, requester: Requester, post_id: int, content: str) -> dict:
    visibility = visibility_for(requester)
    post = get_post(db, post_id, visibility)
    capability = authorize_mutation(requester, post)
    apply_edit(post, content, capability)
    db.commit()
    return get_post_out(db, post_id, visibility)


def delete_post(db: Session, requester: Requester, post_id: int) -> Post:
    post = get_post(db, post_id, visibility_for(requester))
    authorize_mutation(requester, post)
    apply_soft_delete(post)
    db.commit()
    db.refresh(post)
    return post
