from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List, Optional
from app.core.permissions import ContentState


class PostBase(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Content is required")
        return value


class PostCreate(PostBase):
    pass


class PostUpdate(PostBase):
    pass


class PostOut(BaseModel):
    id: int
    user_id: int
    username: str
    full_name: str
    content: str
    deleted: bool
    edited: bool
    edited_by_admin: bool
    state: ContentState
    comment_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostPage(BaseModel):
    items: List[PostOut]
    total: int
    limit: int
    offset: int
    has_more: bool
