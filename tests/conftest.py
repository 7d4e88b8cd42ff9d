"""Global test configuration and fixtures for the User Directory API."""

import os

from tests.utils.auth import TEST_JWT_SECRET

# Settings are read when the app module is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_ACCESS_SECRET"] = TEST_JWT_SECRET
os.environ["ENVIRONMENT"] = "TEST"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, Sequence  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from asgi_lifespan import LifespanManager  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import event, select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.api.core.constants import JWT_ALGORITHM  # noqa: E402
from src.api.core.dependencies import get_db_session  # noqa: E402
from src.database.models import (  # noqa: E402
    AuthContext,
    Base,
    Company,
    Membership,
    RefreshToken,
    User,
    UserRole,
)
from src.database.procedures import StoredProcedure  # noqa: E402
from tests.factories import (  # noqa: E402
    CompanyFactory,
    MembershipFactory,
    RefreshTokenFactory,
    UserFactory,
)

BASE_URL = "http://test-user-directory"


@pytest.fixture
def user_factory():
    return UserFactory


@pytest.fixture
def company_factory():
    return CompanyFactory


@pytest.fixture
def membership_factory():
    return MembershipFactory


@pytest.fixture
def refresh_token_factory():
    return RefreshTokenFactory


@pytest_asyncio.fixture
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite engine with the schema for one test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'directory.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to seed and inspect data.

    Seeding fixtures commit, so requests served by the app see the rows.
    """
    async with session_factory() as session:
        yield session


async def _membership_rows(db: AsyncSession, company_id: UUID) -> list[dict]:
    stmt = (
        select(
            User.id.label("user_id"),
            User.email.label("user_email"),
            User.first_name.label("user_first_name"),
            User.last_name.label("user_last_name"),
            User.phone.label("user_phone"),
            User.created_at.label("user_created_at"),
            User.updated_at.label("user_updated_at"),
            User.role.label("user_role"),
            Membership.role.label("membership_role"),
            Membership.company_id.label("company_id"),
        )
        .join(Membership, Membership.user_id == User.id)
        .where(Membership.company_id == company_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
    )
    result = await db.execute(stmt)
    return [dict(row) for row in result.mappings().all()]


async def _refresh_token_rows(db: AsyncSession, user_id: UUID) -> list[dict]:
    stmt = (
        select(
            RefreshToken.id.label("refresh_token_id"),
            RefreshToken.user_id.label("user_id"),
            RefreshToken.token_id.label("token_identifier"),
            RefreshToken.expires_at.label("expires_at"),
            RefreshToken.revoked.label("is_revoked"),
            RefreshToken.created_at.label("created_at"),
            RefreshToken.context.label("token_context"),
        )
        .where(RefreshToken.user_id == user_id)
        .order_by(RefreshToken.created_at.desc())
    )
    result = await db.execute(stmt)
    rows = []
    for row in result.mappings().all():
        row = dict(row)
        # Storage that keeps booleans as TINYINT
        row["is_revoked"] = int(row["is_revoked"])
        rows.append(row)
    return rows


@pytest.fixture(autouse=True)
def fake_stored_procedures(monkeypatch):
    """Serve the row-set procedures from ORM queries, since SQLite has none.

    Memberships come back wrapped in an outer result-set list, refresh tokens
    as a flat list, so both driver shapes go through the unwrapping code.
    """

    async def _fake_execute_procedure(
        db: AsyncSession, procedure: StoredProcedure, params: Sequence[Any]
    ) -> list[Any]:
        if procedure is StoredProcedure.USER_MEMBERSHIPS:
            return [await _membership_rows(db, params[0]), {"status": 0}]
        if procedure is StoredProcedure.USER_REFRESH_TOKENS:
            return await _refresh_token_rows(db, params[0])
        raise AssertionError(f"Unexpected procedure {procedure}")

    monkeypatch.setattr(
        "src.database.procedures._execute_procedure", _fake_execute_procedure
    )


@pytest_asyncio.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[FastAPI, None]:
    """Create FastAPI application with lifespan manager for testing."""
    from src.main import app

    async def _get_test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _get_test_db_session
    async with LifespanManager(app):
        yield app
    app.dependency_overrides.clear()


# Test Data Fixtures
@pytest_asyncio.fixture
async def test_company(db_session: AsyncSession, company_factory) -> Company:
    company = await company_factory.create_async(db_session, name="Acme Logistics")
    await db_session.commit()
    return company


@pytest_asyncio.fixture
async def other_company(db_session: AsyncSession, company_factory) -> Company:
    company = await company_factory.create_async(db_session, name="Globex Freight")
    await db_session.commit()
    return company


@pytest.fixture
def create_member(
    db_session: AsyncSession, user_factory, membership_factory
) -> Callable[..., Awaitable[User]]:
    """Factory creating a user with a membership in ``company``.

    Pass ``user`` to add a membership to an existing user instead.
    """

    async def _create_member(
        company: Company,
        role: UserRole = UserRole.PICKER,
        user: User | None = None,
        **user_kwargs: Any,
    ) -> User:
        is_new_user = user is None
        if is_new_user:
            user = await user_factory.create_async(
                db_session, role=role, **user_kwargs
            )

        membership = await membership_factory.create_async(
            db_session, user_id=user.id, company_id=company.id, role=role
        )
        if is_new_user:
            user.default_membership_id = membership.id

        await db_session.commit()
        return user

    return _create_member


@pytest_asyncio.fixture
async def owner_user(test_company: Company, create_member) -> User:
    return await create_member(
        test_company, UserRole.OWNER, first_name="Olivia", last_name="Owner"
    )


@pytest_asyncio.fixture
async def admin_user(test_company: Company, create_member) -> User:
    return await create_member(
        test_company, UserRole.ADMIN, first_name="Adam", last_name="Admin"
    )


@pytest_asyncio.fixture
async def picker_user(test_company: Company, create_member) -> User:
    return await create_member(
        test_company, UserRole.PICKER, first_name="Pat", last_name="Picker"
    )


# JWT Token Fixtures
@pytest.fixture
def jwt_token_factory() -> Callable[..., str]:
    """Factory for creating access tokens the way the token issuer does."""

    def create_token(
        user_id: UUID | str,
        company_id: UUID | str,
        context: AuthContext | str = AuthContext.WEB,
        secret: str = TEST_JWT_SECRET,
        expires_in: timedelta = timedelta(minutes=15),
    ) -> str:
        payload = {
            "sub": str(user_id),
            "companyId": str(company_id),
            "context": context.value if isinstance(context, AuthContext) else context,
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    return create_token


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client without credentials."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url=BASE_URL
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_factory(
    app: FastAPI, jwt_token_factory
) -> AsyncGenerator[Callable[[User, Company], AsyncClient], None]:
    """Factory for creating HTTP clients authenticated as a user of a company."""
    clients: list[AsyncClient] = []

    def create_client_for_user(user: User, company: Company) -> AsyncClient:
        token = jwt_token_factory(user.id, company.id)
        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url=BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
        )
        clients.append(client)
        return client

    yield create_client_for_user

    for client in clients:
        await client.aclose()


@pytest.fixture
def owner_client(client_factory, owner_user: User, test_company: Company):
    return client_factory(owner_user, test_company)


@pytest.fixture
def admin_client(client_factory, admin_user: User, test_company: Company):
    return client_factory(admin_user, test_company)


@pytest.fixture
def picker_client(client_factory, picker_user: User, test_company: Company):
    return client_factory(picker_user, test_company)
