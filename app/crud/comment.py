from typing import List
from sqlalchemy.orm import Session
from app.core.errors import NotFound
from app.core.permissions import (
    PUBLIC_VISIBILITY,
    Requester,
    VisibilityFilter,
    apply_edit,
    apply_soft_delete,
    authorize_mutation,
    visibility_for,
)
from app.crud.pagination import in_db_range
from app.crud.post import get_post
from app.db.models.comment import Comment
from app.db.models.user import User


def comment_to_dict(comment: Comment, username: str, full_name: str) -> dict:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user_id": comment.user_id,
        "username": username,
        "full_name": full_name,
        "content": comment.content,
        "deleted": comment.deleted,
        "edited": comment.edited,
        "edited_by_admin": comment.edited_by_admin,
        "state": comment.state,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def _comment_query(db: Session, post_id: int, visibility: VisibilityFilter):
    query = (
        db.query(Comment, User.username, User.full_name)
        .join(User, Comment.user_id == User.id)
        .filter(Comment.post_id == post_id)
    )
    return visibility.apply(query, Comment)


def list_comments(db: Session, post_id: int, visibility: VisibilityFilter) -> List[dict]:
    # comments follow the visibility of their parent post
    get_post(db, post_id, visibility)
    rows = (
        _comment_query(db, post_id, visibility)
        .order_by(Comment.created_at.desc(), Comment.id.asc())
        .all()
    )
    return [comment_to_dict(*row) for row in rows]


def get_comment(db: Session, post_id: int, comment_id: int, visibility: VisibilityFilter) -> Comment:
    get_post(db, post_id, visibility)
    if not in_db_range(comment_id):
        raise NotFound("Comment not found")
    comment = visibility.apply(
        db.query(Comment).filter(Comment.id == comment_id, Comment.post_id == post_id),
        Comment,
    ).first()
    if not comment:
        raise NotFound("Comment not found")
    return comment


def get_comment_out(db: Session, post_id: int, comment_id: int, visibility: VisibilityFilter) -> dict:
    if not (in_db_range(post_id) and in_db_range(comment_id)):
        raise NotFound("Comment not found")
    row = _comment_query(db, post_id, visibility).filter(Comment.id == comment_id).first()
    if not row:
        raise NotFound("Comment not found")
    return comment_to_dict(*row)


def create_comment(db: Session, requester: Requester, post_id: int, content: str) -> dict:
    # nobody, admins and the author included, may comment on a deleted post
    get_post(db, post_id, PUBLIC_VISIBILITY)
    new_comment = Comment(post_id=post_id, user_id=requester.user_id, content=content)
    db.add(new_comment)
    db.commit()
    db.refresh(new_comment)
    return get_comment_out(db, post_id, new_comment.id, visibility_for(requester))


def update_comment(db: Session, requester: Requester, post_id: int, comment_id: int, content: str) -> dict:
    visibility = visibility_for(requester)
    comment = get_comment(db, post_id, comment_id, visibility)
    capability = authorize_mutation(requester, comment)
    apply_edit(comment, content, capability)
    db.commit()
    return get_comment_out(db, post_id, comment_id, visibility)


def delete_comment(db: Session, requester: Requester, post_id: int, comment_id: int) -> Comment:
    comment = get_comment(db, post_id, comment_id, visibility_for(requester))
    authorize_mutation(requester, comment)
    apply_soft_delete(comment)
    db.commit()
    db.refresh(comment)
    return comment
