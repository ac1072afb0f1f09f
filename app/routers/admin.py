import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.permissions import Requester
from app.core.security import get_current_admin
from app.crud import user as crud
from app.schemas.user import RoleUpdate, UserOut
from typing import List

logger = logging.getLogger(__name__)

router = APIRouter()


#get all users
@router.get("/users", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    admin: Requester = Depends(get_current_admin)
):
    return crud.list_users(db)


# Change a user's role. Tokens already issued keep the old role until they expire
@router.put("/users/{user_id}/role", response_model=UserOut)
def change_role(
    user_id: int,
    role_in: RoleUpdate,
    db: Session = Depends(get_db),
    admin: Requester = Depends(get_current_admin)
):
    user = crud.set_role(db, user_id, role_in.role.value)
    logger.info(f"User {user.id} role set to {user.role} by admin {admin.user_id}")
    return user
