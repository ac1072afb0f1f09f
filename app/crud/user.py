from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.errors import NotFound, ValidationError
from app.core.security import hash_password
from app.crud.pagination import in_db_range
from app.db.models.user import User
from app.schemas.user import UserCreate


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, user_in: UserCreate) -> User:
    if get_user_by_username(db, user_in.username):
        raise ValidationError.for_field("username", "Username already exists")

    new_user = User(
        username=user_in.username,
        password=hash_password(user_in.password),
        full_name=user_in.full_name,
        role=user_in.role.value,
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same name
        db.rollback()
        raise ValidationError.for_field("username", "Username already exists")
    db.refresh(new_user)
    return new_user


def update_full_name(db: Session, user_id: int, full_name: str) -> User:
    user = db.get(User, user_id) if in_db_range(user_id) else None
    if not user:
        raise NotFound("User not found")
    user.full_name = full_name
    db.commit()
    db.refresh(user)
    return user


def set_role(db: Session, user_id: int, role: str) -> User:
    user = db.get(User, user_id) if in_db_range(user_id) else None
    if not user:
        raise NotFound("User not found")
    user.role = role
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id.asc()).all()
