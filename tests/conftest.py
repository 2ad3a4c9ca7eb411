"""
Shared fixtures: a fresh file-backed SQLite database per test, the FastAPI
app wired to it, and a small seeded catalog.

Environment must be set before anything from the app is imported.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["TRANSACTION_BACKOFF_SECONDS"] = "0.01"

from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from main import app
from services.product_service.models import Product
from services.user_service.models import Role, User
from shared.config.database import Base, get_db
from shared.config.settings import ADMIN_ROLE_ID, INVOICING_ROLE_ID
from shared.security import Principal, create_user_token, hash_password


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def roles(db):
    admin = Role(id=ADMIN_ROLE_ID, name="admin")
    customer = Role(id=INVOICING_ROLE_ID, name="customer")
    db.add_all([admin, customer])
    await db.commit()
    return {"admin": admin, "customer": customer}


@pytest.fixture
async def admin_user(db, roles):
    user = User(username="root", hashed_password=hash_password("secret1"), role_id=ADMIN_ROLE_ID)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def customer(db, roles, admin_user):
    user = User(username="bob", hashed_password=hash_password("secret2"), role_id=INVOICING_ROLE_ID)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def catalog(db):
    """Product 1: 10 in stock at 5.00. Product 2: 2 in stock at 20.00. Product 3: inactive."""
    entry = datetime(2024, 1, 1, tzinfo=timezone.utc)
    products = [
        Product(id=1, description="Widget", lot_number="L-001", price=Decimal("5.00"), stock=10, entry_date=entry),
        Product(id=2, description="Gadget", lot_number="L-002", price=Decimal("20.00"), stock=2, entry_date=entry),
        Product(id=3, description="Retired", lot_number="L-003", price=Decimal("1.00"), stock=50, entry_date=entry, active=False),
    ]
    db.add_all(products)
    await db.commit()
    return {p.id: p for p in products}


@pytest.fixture
def principal(customer):
    return Principal(user_id=customer.id, role_id=customer.role_id)


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_user_token(admin_user.id, admin_user.role_id)}"}


@pytest.fixture
def customer_headers(customer):
    return {"Authorization": f"Bearer {create_user_token(customer.id, customer.role_id)}"}


@pytest.fixture
def stock_of(session_factory):
    """Stock as committed in the database, seen from a brand new session."""

    async def _stock_of(product_id: int) -> int:
        async with session_factory() as session:
            product = await session.get(Product, product_id)
            return product.stock

    return _stock_of


@pytest.fixture
def count_rows(session_factory):
    async def _count_rows(model) -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count()).select_from(model))

    return _count_rows
