import logging

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import settings
from .models import Setting, ADMIN_PASSWORD_KEY

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def get_admin_password_hash(db: Session) -> str | None:
    row = db.get(Setting, ADMIN_PASSWORD_KEY)
    return row.value if row else None


def set_admin_password(db: Session, password: str):
    row = db.get(Setting, ADMIN_PASSWORD_KEY)
    if row:
        row.value = hash_password(password)
    else:
        db.add(Setting(key=ADMIN_PASSWORD_KEY, value=hash_password(password)))
    db.commit()


def ensure_admin_password(db: Session):
    """Store the bootstrap admin password on first start; an existing secret is left alone."""
    if get_admin_password_hash(db):
        return
    set_admin_password(db, settings.ADMIN_PASSWORD)
    logger.info("Admin password initialised from settings.")
