"""
Seed script for the default roles.
Safe to run repeatedly: existing roles only get their level/description refreshed.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from radar.config import settings
from radar.db import Database
from radar.models.models import Role

# name -> (level, description)
DEFAULT_ROLES = {
    "admin": (100, "Administração completa do painel"),
    "coordenador": (60, "Coordena projetos e equipes"),
    "coordenadora": (60, "Coordena projetos e equipes"),
    "membro": (10, "Acompanha projetos e comenta"),
}


def seed_roles(db: Session) -> int:
    created = 0
    for name, (level, description) in DEFAULT_ROLES.items():
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            db.add(Role(name=name, level=level, description=description))
            created += 1
            print(f"Created role '{name}' (level {level})")
        else:
            role.level = level
            role.description = description
            print(f"Role '{name}' already exists, refreshed")
    db.commit()
    return created


if __name__ == "__main__":
    database = Database.from_settings(settings)
    database.create_all()
    db = database.session()
    try:
        total = seed_roles(db)
        print(f"✅ {total} role(s) created")
    finally:
        db.close()
        database.dispose()
