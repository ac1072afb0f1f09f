from passlib.context import CryptContext
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta
from typing import Optional, Tuple
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core import config
from app.core.errors import AuthenticationError, ExpiredToken, InvalidToken, MalformedClaims, PermissionDenied
from app.core.permissions import Requester, Role
from app.crud.pagination import in_db_range
from app.db.session import get_db
from app.db.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error is off so a missing header goes through our own 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def issue_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(days=config.JWT_EXPIRE_DAYS))
    to_encode = {
        "sub": str(user_id),
        "role": Role(role).value,
        "exp": expire,
    }
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def resolve_token(token: str) -> Requester:
    """Decode a bearer token into the requester it was issued to.

    Raises ExpiredToken past validity, InvalidToken for a bad signature or
    format, and MalformedClaims when ``sub`` or ``role`` is unusable.
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise ExpiredToken()
    except JWTError:
        raise InvalidToken()

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role is None:
        raise MalformedClaims()
    try:
        requester = Requester(user_id=int(subject), role=Role(role))
    except ValueError:
        raise MalformedClaims()
    if not in_db_range(requester.user_id):
        raise MalformedClaims()
    return requester


def authenticate(token: Optional[str], db: Session) -> Tuple[Requester, User]:
    """Resolve the bearer token and load the user it names, in one lookup."""
    if not token:
        raise AuthenticationError()
    requester = resolve_token(token)
    user = db.get(User, requester.user_id)
    if user is None:
        raise AuthenticationError("User not found")
    # the role in the token stays authoritative until it expires
    return requester, user


def get_requester(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Requester:
    requester, _ = authenticate(token, db)
    return requester


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    _, user = authenticate(token, db)
    return user


def get_current_admin(requester: Requester = Depends(get_requester)) -> Requester:
    if not requester.is_admin:
        raise PermissionDenied("Admin access required")
    return requester
