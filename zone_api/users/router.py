from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.responses import success_response
from ..database.database import get_db
from .crud import change_password, update_user
from .models import User
from .schemas import PasswordChange, UserOut, UserUpdate
from .security import get_current_user

router = APIRouter(prefix="/users", tags=["Users"])


def _profile(user: User) -> dict:
    return UserOut.model_validate(user).model_dump(by_alias=True)


@router.get("/me")
def get_me(request: Request, current_user: User = Depends(get_current_user)):
    return success_response(request, _profile(current_user))


@router.put("/me")
def update_me(
    data: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = update_user(db, current_user, data.model_dump(mode="json", exclude_unset=True))
    return success_response(request, _profile(user))


@router.put("/me/password")
def update_my_password(
    data: PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(
        request, change_password(db, current_user, data.current_password, data.new_password)
    )
