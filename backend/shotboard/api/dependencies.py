from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from shotboard import schemas
from shotboard.core.config import settings
from shotboard.db.session import SessionLocal
from shotboard.realtime import InMemoryPresenceStore, Relay, RoomRegistry
from shotboard.services.access import can_join
from shotboard.services.auth import AuthService


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user(
    token: Optional[str] = Depends(session_token), db: Session = Depends(get_db)
) -> schemas.CurrentUser:
    user = AuthService(db).current_user(token)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def authenticate_token(token: str) -> Optional[str]:
    db = SessionLocal()
    try:
        user = AuthService(db).current_user(token)
        return user.email if user else None
    finally:
        db.close()


def authorize_join(project_id: str, identity: str) -> bool:
    db = SessionLocal()
    try:
        return can_join(db, project_id, identity)
    finally:
        db.close()


def build_presence_store():
    if settings.PRESENCE_BACKEND == "redis":
        from shotboard.core.redis import redis_client
        from shotboard.realtime import RedisPresenceStore
        return RedisPresenceStore(redis_client, ttl=settings.PRESENCE_TTL_SECONDS)
    return InMemoryPresenceStore()


relay = Relay(
    RoomRegistry(build_presence_store()),
    require_auth=settings.RELAY_REQUIRE_AUTH,
    authenticate=authenticate_token,
    authorize_join=authorize_join,
)


def get_relay() -> Relay:
    return relay
