import asyncio
import os
import uuid
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("NEXT_PUBLIC_APP_URL", "http://app.test")

import foodies.domain  # noqa: E402,F401
from foodies.core.exceptions import IdentityServiceError, StorageError  # noqa: E402
from foodies.db.base import Base  # noqa: E402
from foodies.domain.profile import Profile  # noqa: E402
from foodies.main import create_app  # noqa: E402
from foodies.services.identity import IdentityUser  # noqa: E402


class FakeIdentity:
    """
    In-memory stand-in for the identity service client.

    Names listed in ``failing`` raise IdentityServiceError when called.
    """

    def __init__(self):
        self.users: Dict[str, IdentityUser] = {}
        self.tokens: Dict[str, str] = {}
        self.passwords: Dict[str, str] = {}
        self.bans: Dict[str, str] = {}
        self.invites: List[Dict[str, Any]] = []
        self.links: List[Dict[str, Any]] = []
        self.failing: set = set()

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise IdentityServiceError(f"{name} failed")

    def add_user(self, email: Optional[str] = None, user_id: Optional[str] = None, **metadata) -> IdentityUser:
        user = IdentityUser(id=user_id or str(uuid.uuid4()), email=email, user_metadata=metadata)
        self.users[user.id] = user
        return user

    def sign_in(self, user_id: str) -> Dict[str, str]:
        if user_id not in self.users:
            self.add_user(user_id=user_id)
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return {"Authorization": f"Bearer {token}"}

    async def get_user(self, access_token: str) -> Optional[IdentityUser]:
        self._check("get_user")
        return self.users.get(self.tokens.get(access_token, ""))

    async def invite_user_by_email(self, email: str, *, data: Dict[str, Any], redirect_to: str) -> IdentityUser:
        self._check("invite_user_by_email")
        user = self.add_user(email, **data)
        self.invites.append({"email": email, "data": data, "redirect_to": redirect_to})
        return user

    async def generate_link(self, link_type: str, email: str, *, redirect_to: str) -> str:
        self._check("generate_link")
        n = len(self.links) + 1
        self.links.append({"type": link_type, "email": email, "redirect_to": redirect_to})
        return f"http://identity.test/verify?type={link_type}#access_token=acc-{n}&refresh_token=ref-{n}"

    async def create_user(self, email: str, password: str, *, user_metadata=None, email_confirm: bool = True) -> IdentityUser:
        self._check("create_user")
        user = self.add_user(email, **(user_metadata or {}))
        self.passwords[user.id] = password
        return user

    async def update_user_by_id(self, user_id: str, **attributes) -> IdentityUser:
        self._check("update_user_by_id")
        user = self.users.get(user_id) or self.add_user(user_id=user_id)
        if "password" in attributes:
            self.passwords[user_id] = attributes["password"]
        if "ban_duration" in attributes:
            self.bans[user_id] = attributes["ban_duration"]
        return user

    async def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        self._check("find_user_by_email")
        for user in self.users.values():
            if (user.email or "").lower() == email.lower():
                return user
        return None

    async def set_ban(self, user_id: str, ban_duration: str) -> None:
        self._check("set_ban")
        self.bans[user_id] = ban_duration

    async def aclose(self) -> None:
        return None


class FakeStorage:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.fail = False

    async def upload(self, path: str, content: bytes, *, content_type: str) -> str:
        if self.fail:
            raise StorageError("Upload failed: 500")
        self.objects[path] = content
        return f"http://storage.test/public-assets/{path}"

    async def aclose(self) -> None:
        return None


class Database:
    """
    Synchronous helpers for seeding and inspecting the per-test SQLite file.
    """

    def __init__(self, url: str):
        self.engine = create_async_engine(url, poolclass=NullPool)
        self.session_factory = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )

    def _run(self, fn):
        async def _go():
            async with self.session_factory() as session:
                result = await fn(session)
                await session.commit()
                return result

        return asyncio.run(_go())

    def create_all(self) -> None:
        async def _go():
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        asyncio.run(_go())

    def add(self, *rows):
        async def _add(session):
            session.add_all(rows)
            await session.flush()
            return rows

        self._run(_add)
        return rows[0] if len(rows) == 1 else rows

    def get(self, model, entity_id: str):
        async def _get(session):
            return await session.get(model, entity_id)

        return self._run(_get)

    def all(self, model, **filters) -> list:
        async def _all(session):
            q = select(model).filter_by(**filters)
            return list((await session.execute(q)).scalars().unique().all())

        return self._run(_all)


@pytest.fixture()
def db(tmp_path) -> Database:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'foodies_test.db'}")
    database.create_all()
    return database


@pytest.fixture()
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def app(db, identity, storage):
    application = create_app()
    application.state.session_factory = db.session_factory
    application.state.identity = identity
    application.state.storage = storage
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db, identity):
    """
    Create a Profile plus a matching identity user; returns (profile, auth headers).
    """

    def _make(role: str, organization: Optional[str] = "Lincoln High", status: str = "approved", **fields):
        profile = Profile(
            id=fields.pop("id", None) or str(uuid.uuid4()),
            email=fields.pop("email", None) or f"{role}-{uuid.uuid4().hex[:6]}@lincoln.edu",
            full_name=fields.pop("full_name", None) or f"{role.title()} User",
            role=role,
            organization=organization,
            status=status,
            **fields,
        )
        db.add(profile)
        identity.add_user(profile.email, user_id=profile.id, role=role)
        return profile, identity.sign_in(profile.id)

    return _make
