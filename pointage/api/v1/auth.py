"""
Authentication endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pointage.core.deps import get_db, get_current_session
from pointage.core.security import verify_password, create_access_token
from pointage.schemas.auth import LoginRequest, TokenResponse, UserSession
from pointage.services.user_service import get_user_by_email, is_company_email

router = APIRouter()
_log = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Only company e-mail addresses may sign in; inactive users are rejected.
    The token carries the user id (sub) and role.
    """
    if not is_company_email(login_data.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only company accounts are allowed"
        )

    user = get_user_by_email(db, login_data.email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    if user.password_hash is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No password set for this account"
        )

    if not verify_password(login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = create_access_token({"sub": str(user.id), "role": user.role})
    _log.info("User %s logged in", user.id)
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserSession)
async def me(session: UserSession = Depends(get_current_session)):
    """Current session identity"""
    return session
