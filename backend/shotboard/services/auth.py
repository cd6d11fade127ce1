"""
Session/auth gate.

Credentials are checked against the users table or the configured superuser.
A successful login creates a server-side session row whose token is handed to
the client as a cookie.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from shotboard import models, schemas
from shotboard.core.config import settings

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False

    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


def is_superuser(identity: Optional[str]) -> bool:
    return bool(identity) and identity == settings.SUPERUSER_EMAIL


class AuthService:

    def __init__(self, db: Session):
        self.db = db

    def register(self, email: str, password: str) -> Optional[models.User]:
        """Create a user; None when the email is taken (or is the superuser)."""
        email = email.strip()
        if is_superuser(email) or self.db.get(models.User, email):
            return None

        user = models.User(email=email, password_hash=hash_password(password))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s", email)
        return user

    def login(self, email: str, password: str) -> Optional[models.UserSession]:
        email = email.strip()

        if is_superuser(email):
            if not hmac.compare_digest(password, settings.SUPERUSER_PASSWORD):
                logger.info("Rejected superuser login")
                return None
            return self._open_session(identity=email, email=None)

        user = self.db.get(models.User, email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Rejected login for %s", email)
            return None
        return self._open_session(identity=email, email=email)

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        session = self.db.get(models.UserSession, token)
        if session:
            self.db.delete(session)
            self.db.commit()

    def current_user(self, token: Optional[str]) -> Optional[schemas.CurrentUser]:
        if not token:
            return None

        session = self.db.get(models.UserSession, token)
        if not session:
            return None
        if session.expires_at <= datetime.utcnow():
            self.db.delete(session)
            self.db.commit()
            return None

        return schemas.CurrentUser(
            email=session.identity, isSuperuser=is_superuser(session.identity)
        )

    def _open_session(self, identity: str, email: Optional[str]) -> models.UserSession:
        now = datetime.utcnow()
        session = models.UserSession(
            token=secrets.token_urlsafe(32),
            email=email,
            identity=identity,
            created_at=now,
            expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        logger.info("Opened session for %s", identity)
        return session
