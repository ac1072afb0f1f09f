import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.errors import ServerError
from app.core.permissions import Requester, visibility_for
from app.core.security import get_requester
from app.crud import comment as crud
from app.db.session import get_db
from app.schemas.comment import CommentCreate, CommentOut, CommentUpdate
from app.schemas.message import Message

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{post_id}/comments", response_model=List[CommentOut])
def get_comments(
    post_id: int,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    return crud.list_comments(db, post_id, visibility_for(requester))


@router.post("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        return crud.create_comment(db, requester, post_id, comment_in.content)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to create comment")


@router.put("/{post_id}/comments/{comment_id}", response_model=CommentOut)
def update_comment(
    post_id: int,
    comment_id: int,
    comment_in: CommentUpdate,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        return crud.update_comment(db, requester, post_id, comment_id, comment_in.content)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to update comment")


@router.delete("/{post_id}/comments/{comment_id}", response_model=Message)
def delete_comment(
    post_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        crud.delete_comment(db, requester, post_id, comment_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to delete comment")
    return {"message": "Comment deleted successfully"}
