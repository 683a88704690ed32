from sqlalchemy.orm import Session
from .models import UserSession
from datetime import datetime

def create_session(
    db: Session,
    user_id: int,
    refresh_token: str,
    expires_at: datetime,
    device: str = None,
    ip: str = None
):
    try:
        session = UserSession(
            user_id=user_id,
            refresh_token=refresh_token,
            expires_at=expires_at,
            device=device,
            ip=ip,
            created_at=datetime.utcnow(),
            last_activity=datetime.utcnow(),
            is_active=True
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session
    except Exception:
        db.rollback()
        raise


def deactivate_session(db: Session, refresh_token: str, user_id: int = None):
    query = db.query(UserSession).filter_by(refresh_token=refresh_token, is_active=True)
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    session = query.first()
    if session:
        session.is_active = False
        db.commit()
    return session

def deactivate_user_sessions(db: Session, user_id: int) -> int:
    count = db.query(UserSession).filter_by(user_id=user_id, is_active=True).update({"is_active": False})
    db.commit()
    return count

def get_active_session(db: Session, refresh_token: str):
    session = db.query(UserSession).filter_by(refresh_token=refresh_token, is_active=True).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        session.is_active = False
        db.commit()
        return None
    return session
