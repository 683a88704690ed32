from datetime import datetime, timedelta
import logging
import time

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, UnauthorizedError, ValidationError
from ..users.crud import create_user, email_exists, generate_username, get_user_by_email, username_exists
from ..users.models import User
from ..users.schemas import UserCreate, UserOut
from ..users.security import (
    REFRESH_TOKEN_EXPIRE_DAYS,
    create_refresh_token,
    create_token_for_user,
    password_errors,
    verify_password,
)
from ..users.sessions.crud import (
    create_session,
    deactivate_session,
    deactivate_user_sessions,
    get_active_session,
)

logger = logging.getLogger(__name__)

# Si al refresh token le queda menos que esto, se rota
REFRESH_ROTATION_WINDOW = timedelta(days=1)


def _issue_tokens(db: Session, user: User, device: str = None, ip: str = None) -> dict:
    refresh_token = create_refresh_token()
    expires_at = datetime.utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    create_session(db, user.id, refresh_token, expires_at, device, ip)
    return {
        "user": UserOut.model_validate(user).model_dump(by_alias=True),
        "accessToken": create_token_for_user(user),
        "refreshToken": refresh_token,
    }


def register_user(db: Session, data: UserCreate, ip: str = None) -> dict:
    start = time.monotonic()

    errors = password_errors(data.password)
    if errors:
        raise ValidationError("Password does not meet requirements", {"password": ", ".join(errors)})

    if email_exists(db, data.email):
        raise ConflictError("Email already registered")

    if data.username:
        if username_exists(db, data.username):
            raise ConflictError("Username already taken")
        username = data.username
    else:
        username = generate_username(db, data.email)

    user = create_user(db, data.email, data.password, data.name, username)
    result = _issue_tokens(db, user, ip=ip)

    logger.info(f"✅ Usuario registrado user_id={user.id} duration_ms={int((time.monotonic() - start) * 1000)}")
    return result


def login_user(db: Session, email: str, password: str, ip: str = None) -> dict:
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        logger.info(f"❌ Usuario {email} no encontrado o inactivo")
        raise UnauthorizedError("Invalid email or password")

    if not verify_password(password, user.password_hash):
        logger.info(f"❌ Contraseña incorrecta para user_id={user.id}")
        raise UnauthorizedError("Invalid email or password")

    result = _issue_tokens(db, user, ip=ip)
    logger.info(f"✅ Login user_id={user.id}")
    return result


def refresh_access_token(db: Session, refresh_token: str) -> dict:
    session = get_active_session(db, refresh_token)
    if not session or not session.user.is_active:
        raise UnauthorizedError("Invalid or expired refresh token")

    # Rotar el refresh token si está cerca de expirar
    new_refresh = refresh_token
    if session.expires_at - datetime.utcnow() < REFRESH_ROTATION_WINDOW:
        new_refresh = create_refresh_token()
        session.refresh_token = new_refresh
        session.expires_at = datetime.utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
        logger.info(f"🔄 Refresh token rotado para user_id={session.user_id}")

    session.last_activity = datetime.utcnow()
    db.commit()

    return {
        "accessToken": create_token_for_user(session.user),
        "refreshToken": new_refresh,
    }


def logout_user(db: Session, user: User, refresh_token: str = None) -> dict:
    if refresh_token:
        if not deactivate_session(db, refresh_token, user_id=user.id):
            raise UnauthorizedError("Invalid refresh token")
        logger.info(f"👋 Logout user_id={user.id}")
    else:
        count = deactivate_user_sessions(db, user.id)
        logger.info(f"👋 Logout user_id={user.id} (todas las sesiones: {count})")
    return {"message": "Logged out successfully"}
