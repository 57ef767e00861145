import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cineman.auth.service import AuthService
from cineman.auth.utils import verify_access_token
from cineman.database import get_db
from cineman.notifications import get_notifier

bearer_scheme = HTTPBearer(auto_error=False)

def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> uuid.UUID:
    """Resolve the authenticated subject id from the access token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    if payload.get("allowLogin") is not True:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not allowed to make requests. Please reach out to support."
        )

    try:
        return uuid.UUID(payload["sub"])
    except ValueError:
        raise credentials_exception

def get_auth_service(db: Session = Depends(get_db), notifier=Depends(get_notifier)) -> AuthService:
    return AuthService(db, notifier)
