from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..config import Settings
from ..db import get_db
from ..models.enums import Visibility
from ..models.models import User
from ..services.identity import Identity, ensure_user_profile
from ..services.permissions import can_manage_projects


http_bearer = HTTPBearer(auto_error=False)

NOT_AUTHENTICATED = "Não autenticado."
FORBIDDEN = "Permissão insuficiente."


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def decode_token(token: str, settings: Settings) -> dict:
    """Validate an identity-provider access token and return its claims."""
    options = {"require": ["sub", "exp"]}
    try:
        if settings.auth_jwt_audience:
            return jwt.decode(
                token,
                settings.auth_jwt_secret,
                algorithms=[settings.auth_jwt_algorithm],
                audience=settings.auth_jwt_audience,
                options=options,
            )
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            options={**options, "verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão expirada.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHENTICATED)


def get_optional_identity(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Identity of the caller, or None for anonymous requests.

    A token that is present but invalid is still rejected with 401.
    """
    if creds is None:
        return None
    claims = decode_token(creds.credentials, settings)
    try:
        return Identity.from_claims(claims)
    except (KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHENTICATED)


def get_session_identity(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Like ``get_optional_identity`` but an expired or invalid token counts as anonymous.

    Used by read paths that also serve anonymous callers.
    """
    try:
        return get_optional_identity(creds, settings)
    except HTTPException:
        return None


def get_current_user(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> User:
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHENTICATED)
    return ensure_user_profile(db, identity)


def require_manager(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
    if not can_manage_projects(db, user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)
    return user


def visibility_scope(
    visibility: Optional[Visibility] = Query(default=None),
    identity: Optional[Identity] = Depends(get_session_identity),
) -> Optional[Visibility]:
    """Anonymous callers only ever see public projects."""
    if identity is None:
        return Visibility.PUBLIC
    return visibility
