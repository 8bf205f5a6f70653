"""
Assign a role to an existing user.

Usage: python scripts/grant_role.py <email> <role_name>
The user must have signed in at least once so the local profile exists.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from radar.config import settings
from radar.db import Database
from radar.models.models import Role, User


def grant_role(db: Session, email: str, role_name: str) -> bool:
    """Returns False if the user already had the role."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        raise ValueError(f"User not found: {email}")
    role = db.query(Role).filter(Role.name == role_name).first()
    if role is None:
        raise ValueError(f"Role not found: {role_name}")
    if role in user.roles:
        return False
    user.roles.append(role)
    db.commit()
    return True


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    database = Database.from_settings(settings)
    db = database.session()
    try:
        if grant_role(db, sys.argv[1], sys.argv[2]):
            print(f"✅ Granted '{sys.argv[2]}' to {sys.argv[1]}")
        else:
            print(f"{sys.argv[1]} already has '{sys.argv[2]}'")
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)
    finally:
        db.close()
        database.dispose()
