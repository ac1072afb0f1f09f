import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.errors import ServerError
from app.core.permissions import Requester
from app.core.security import get_requester
from app.crud import user as crud
from app.db.session import get_db
from app.schemas.user import ProfileUpdate, UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


# Update display name of the current user
@router.put("/profile", response_model=UserOut)
def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester)
):
    try:
        return crud.update_full_name(db, requester.user_id, profile.full_name)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {str(e)}")
        raise ServerError("Failed to update profile")
