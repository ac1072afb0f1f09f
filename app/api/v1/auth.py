import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.core.errors import AuthenticationError
from app.core.security import get_current_user, issue_token, verify_password
from app.crud import user as crud
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.token import Token
from app.schemas.user import UserCreate, UserLogin, UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    new_user = crud.create_user(db, user_in)
    logger.info(f"User registered: {new_user.username} ({new_user.role})")
    return Token(
        access_token=issue_token(new_user.id, new_user.role),
        user=UserOut.model_validate(new_user),
    )


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = crud.get_user_by_username(db, credentials.username)
    # same message for unknown user and wrong password
    if not user or not verify_password(credentials.password, user.password):
        raise AuthenticationError("Invalid credentials")

    return Token(
        access_token=issue_token(user.id, user.role),
        user=UserOut.model_validate(user),
    )


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
