"""Shared fixtures: a throwaway SQLite database, the app and token helpers."""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

import jwt
import pytest
from fastapi.testclient import TestClient

from radar.config import Settings
from radar.db import Database
from radar.main import create_app
from radar.models.models import Project, Role, User


TEST_SECRET = "test-jwt-secret"
TEST_AUDIENCE = "authenticated"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'radar-test.db'}",
        auth_jwt_secret=TEST_SECRET,
        auth_jwt_audience=TEST_AUDIENCE,
        storage_provider="local",
        storage_local_dir=str(tmp_path / "storage"),
        public_base_url="http://testserver",
        metrics_enabled=False,
        rate_limit="10000/minute",
        upload_max_bytes=1024,
    )


@pytest.fixture()
def database(settings):
    database = Database.from_settings(settings)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture()
def client(settings, database):
    app = create_app(settings, database)
    with TestClient(app) as c:
        yield c


def make_token(
    user_id,
    email: str,
    name: Optional[str] = None,
    avatar: Optional[str] = None,
    expires_in: int = 3600,
    secret: str = TEST_SECRET,
) -> str:
    now = int(time.time())
    metadata = {}
    if name:
        metadata["full_name"] = name
    if avatar:
        metadata["avatar_url"] = avatar
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": TEST_AUDIENCE,
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": metadata,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id, user.email, user.name)}"}


def make_user(db, email: str, name: str = "Pessoa Teste", role: Optional[str] = None, level: int = 0) -> User:
    user = User(id=uuid.uuid4(), name=name, email=email.lower())
    if role:
        existing = db.query(Role).filter(Role.name == role).first()
        user.roles.append(existing or Role(name=role, level=level))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_project(db, name: str = "Portal da Transparência", visibility: str = "public", area: str = "transparencia",
                 status: str = "em_andamento", progress: int = 0, created_by: Optional[User] = None) -> Project:
    project = Project(
        name=name,
        description="Descrição longa o suficiente do projeto.",
        area=area,
        status=status,
        priority="media",
        progress=progress,
        start_date=datetime(2025, 1, 10, tzinfo=timezone.utc),
        end_date=datetime(2025, 12, 20, tzinfo=timezone.utc),
        visibility=visibility,
        created_by_id=created_by.id if created_by else None,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture()
def manager(db) -> User:
    return make_user(db, "coordenacao@orgao.gov.br", name="Ana Coordenadora", role="coordenadora", level=60)


@pytest.fixture()
def member(db) -> User:
    return make_user(db, "membro@orgao.gov.br", name="Bruno Membro", role="membro", level=10)


@pytest.fixture()
def project_payload() -> dict:
    return {
        "name": "Radar de Inovação",
        "description": "Mapeamento das iniciativas de inovação do órgão.",
        "area": "inovacao",
        "status": "planejado",
        "priority": "alta",
        "startDate": "2025-02-01T00:00:00.000Z",
        "endDate": "2025-08-31T00:00:00.000Z",
        "visibility": "public",
        "featured": True,
        "image": "https://cdn.orgao.gov.br/capas/radar.png",
        "imagePosition": "top",
    }
