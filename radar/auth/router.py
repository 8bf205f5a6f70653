from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..models.models import User
from ..services.identity import Identity, ensure_user_profile
from ..services.mappers import map_user
from .security import get_session_identity


router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/me")
def me(identity: Optional[Identity] = Depends(get_session_identity), db: Session = Depends(get_db)):
    if identity is None:
        return {"user": None}
    profile = ensure_user_profile(db, identity)
    user = db.query(User).options(joinedload(User.roles)).filter(User.id == profile.id).first()
    if user is None:
        return {"user": None}
    return {"user": map_user(user)}
