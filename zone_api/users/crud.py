from sqlalchemy.orm import Session
from .models import User
from ..core.exceptions import ValidationError
from .security import hash_password, password_errors, verify_password
import logging

logger = logging.getLogger(__name__)

def email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email.lower()).first() is not None

def username_exists(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None

def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()

def generate_username(db: Session, email: str) -> str:
    """Usa la parte local del correo; agrega un sufijo numérico si ya existe."""
    base = email.split("@")[0].lower()
    username = base
    counter = 1
    while username_exists(db, username):
        username = f"{base}{counter}"
        counter += 1
    return username

def create_user(db: Session, email: str, password: str, name: str, username: str):
    try:
        user = User(
            email=email.lower(),
            username=username,
            name=name,
            password_hash=hash_password(password),
            is_active=True
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"✅ Usuario creado con id {user.id}")
        return user
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error creando usuario: {e}")
        raise

def update_user(db: Session, user: User, data: dict) -> User:
    if "name" in data and data["name"] is None:
        raise ValidationError("Required fields cannot be null", {"name": "null"})
    # Solo cambian los campos enviados
    for key, value in data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    logger.info(f"✏️ Perfil actualizado user_id={user.id} fields={sorted(data)}")
    return user

def change_password(db: Session, user: User, current_password: str, new_password: str) -> dict:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    errors = password_errors(new_password)
    if errors:
        raise ValidationError("New password does not meet requirements", {"password": ", ".join(errors)})

    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info(f"🔑 Contraseña cambiada user_id={user.id}")
    return {"message": "Password updated successfully"}
