from passlib.context import CryptContext
from datetime import datetime, timedelta
from jose import jwt, JWTError, ExpiredSignatureError
import re
import secrets
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ..core.exceptions import UnauthorizedError
from ..database.config import settings
from ..database.database import get_db
from .models import User

# bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT
SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm

# Expiraciones
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days

MIN_PASSWORD_LENGTH = 8

# Hash de password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def password_errors(password: str) -> list:
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Za-z]", password):
        errors.append("Password must contain a letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain a number")
    return errors

# Crear access token JWT
def create_access_token(data: dict, expires_delta: int = ACCESS_TOKEN_EXPIRE_MINUTES):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_delta)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def create_token_for_user(user: User) -> str:
    return create_access_token({"sub": user.email, "user_id": user.id, "username": user.username})

# Crear refresh token aleatorio
def create_refresh_token():
    return secrets.token_urlsafe(64)

# OAuth2 para leer token del header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# Decodificar access token
def decode_token(token: str = Depends(oauth2_scheme)) -> dict:
    if not token:
        raise UnauthorizedError("No token provided")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid token")

    if payload.get("user_id") is None or payload.get("type") != "access":
        raise UnauthorizedError("Invalid token")
    return payload

def get_current_user(
    request: Request,
    payload: dict = Depends(decode_token),
    db: Session = Depends(get_db)
) -> User:
    user = db.query(User).filter(User.id == payload["user_id"], User.is_active == True).first()
    if not user:
        raise UnauthorizedError("User not found or inactive")
    # Contexto de los logs de error: solo el id, el modelo ya no tiene sesión
    # cuando corren los handlers
    request.state.user_id = user.id
    return user
