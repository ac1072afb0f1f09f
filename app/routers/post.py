import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.errors import ServerError
from app.core.permissions import Requester, visibility_for
from app.core.security import get_requester
from app.crud import post as crud
from app.db.session import get_db
from app.schemas.message import Message
from app.schemas.post import PostCreate, PostOut, PostPage, PostUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


# Timeline, newest first. limit/offset are normalized, never rejected
@router.get("", response_model=PostPage)
def get_posts(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    return crud.list_posts(db, visibility_for(requester), limit=limit, offset=offset)


# Substring search over content and author username. A blank q lists everything
@router.get("/search", response_model=PostPage)
def search_posts(
    q: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    return crud.list_posts(db, visibility_for(requester), limit=limit, offset=offset, search=q)


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    post_in: PostCreate,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        return crud.create_post(db, requester, post_in.content)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to create post")


@router.get("/{post_id}", response_model=PostOut)
def get_post_by_id(
    post_id: int,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    return crud.get_post_out(db, post_id, visibility_for(requester))


@router.put("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    post_in: PostUpdate,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        return crud.update_post(db, requester, post_id, post_in.content)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to update post")


#soft delete; the row stays for admins
@router.delete("/{post_id}", response_model=Message)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        post = crud.delete_post(db, requester, post_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to delete post")
    logger.info(f"Post {post.id} deleted by user {requester.user_id}")
    return {"message": "Post deleted successfully"}
