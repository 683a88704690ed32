from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..core.responses import success_response
from ..database.database import get_db
from ..users.models import User
from ..users.schemas import UserCreate
from ..users.security import get_current_user
from .crud import login_user, logout_user, refresh_access_token, register_user
from .schemas import LoginRequest, LogoutRequest, RefreshRequest

router = APIRouter(prefix="/auth", tags=["Auth"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/register")
def register(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    result = register_user(db, data, ip=_client_ip(request))
    return success_response(request, result, status.HTTP_201_CREATED)


@router.post("/login")
def login(data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    result = login_user(db, data.email, data.password, ip=_client_ip(request))
    return success_response(request, result)


@router.post("/refresh")
def refresh(data: RefreshRequest, request: Request, db: Session = Depends(get_db)):
    return success_response(request, refresh_access_token(db, data.refresh_token))


@router.post("/logout")
def logout(
    request: Request,
    data: LogoutRequest = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    refresh_token = data.refresh_token if data else None
    return success_response(request, logout_user(db, current_user, refresh_token))
