from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from app.core.permissions import ContentState
from app.schemas.post import PostBase


class CommentCreate(PostBase):
    pass


class CommentUpdate(PostBase):
    pass


class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    username: str
    full_name: str
    content: str
    deleted: bool
    edited: bool
    edited_by_admin: bool
    state: ContentState
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
