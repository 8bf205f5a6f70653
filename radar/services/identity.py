import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from ..models.models import User


DEFAULT_USER_NAME = "Usuário"

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


@dataclass(frozen=True)
class Identity:
    """A caller authenticated by the external identity provider."""

    id: uuid.UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Identity":
        metadata = claims.get("user_metadata") or {}
        return cls(
            id=uuid.UUID(str(claims["sub"])),
            email=claims.get("email") or None,
            full_name=metadata.get("full_name") or metadata.get("name") or None,
            avatar_url=metadata.get("avatar_url") or None,
        )

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split("@")[0]
        return DEFAULT_USER_NAME


def ensure_user_profile(db: Session, identity: Identity) -> User:
    """Insert or refresh the local profile for ``identity``.

    Name, e-mail and avatar always take the provider's latest values.
    """
    values = {
        "name": identity.display_name,
        "email": (identity.email or "").strip().lower(),
        "avatar": identity.avatar_url,
    }
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        user = db.get(User, identity.id) or User(id=identity.id)
        for field, value in values.items():
            setattr(user, field, value)
        db.add(user)
    else:
        # Single statement, so concurrent first logins cannot race each other
        stmt = insert(User).values(id=identity.id, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.id],
            set_=dict(values, updated_at=datetime.utcnow()),
        )
        db.execute(stmt)
    db.commit()
    return db.get(User, identity.id, populate_existing=True)
