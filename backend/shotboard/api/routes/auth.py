from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from shotboard import schemas
from shotboard.api.dependencies import get_current_user, get_db, session_token
from shotboard.core.config import settings
from shotboard.services.auth import AuthService, is_superuser

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        samesite="lax",
    )


@router.post("/login", response_model=schemas.AuthResult)
def login(credentials: schemas.Credentials, response: Response, db: Session = Depends(get_db)):
    session = AuthService(db).login(credentials.email, credentials.password)
    if not session:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    _set_session_cookie(response, session.token)
    return schemas.AuthResult(
        user=schemas.CurrentUser(email=session.identity, isSuperuser=is_superuser(session.identity))
    )


@router.post("/register", response_model=schemas.AuthResult, status_code=status.HTTP_201_CREATED)
def register(credentials: schemas.Credentials, response: Response, db: Session = Depends(get_db)):
    service = AuthService(db)
    user = service.register(credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    session = service.login(credentials.email, credentials.password)
    _set_session_cookie(response, session.token)
    return schemas.AuthResult(user=schemas.CurrentUser(email=user.email))


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(session_token),
    db: Session = Depends(get_db),
):
    AuthService(db).logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/me", response_model=schemas.CurrentUser)
def me(user: schemas.CurrentUser = Depends(get_current_user)):
    return user
