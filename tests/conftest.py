"""
Fixtures compartidos

Base SQLite en memoria (StaticPool, una sola conexión), reloj fijo en la zona
del negocio y contexto de autenticación admin inyectado vía
dependency_overrides.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMEZONE"] = "America/Argentina/Buenos_Aires"

from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from repcell.main import app
from repcell.core.clock import FixedClock, get_clock
from repcell.core.config import settings
from repcell.database.database import Base, get_db
from repcell.modules.auth.dependencies import get_auth_context
from repcell.modules.auth.schemas import AuthContext, UserRole
from repcell.modules.inventory.models import Product

BUSINESS_TZ = ZoneInfo("America/Argentina/Buenos_Aires")
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=BUSINESS_TZ)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def money(value) -> Decimal:
    """Decimal desde JSON (pydantic serializa Decimal como string)."""
    return Decimal(str(value))


@pytest.fixture
def clock():
    return FixedClock(NOW, BUSINESS_TZ)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _override_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def _client_for(role, clock):
    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_auth_context] = lambda: AuthContext(
        user_id="test-user", user_role=role
    )
    return TestClient(app)


@pytest.fixture
def client(db_session, clock):
    """Cliente autenticado como admin"""
    yield _client_for(UserRole.ADMIN, clock)
    app.dependency_overrides.clear()


@pytest.fixture
def cashier_client(db_session, clock):
    """Cliente autenticado como cajero (sin permisos de admin)"""
    yield _client_for(UserRole.CASHIER, clock)
    app.dependency_overrides.clear()


@pytest.fixture
def raw_client(db_session, clock):
    """Cliente sin override de auth: valida el JWT real"""
    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    def _make(sub="user-1", role="admin"):
        payload = {"sub": sub}
        if role:
            payload["role"] = role
        return jwt.encode(payload, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)
    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name="Pantalla", quantity=3, price=Decimal("10.00"), **kwargs):
        product = Product(name=name, quantity=quantity, price=price, **kwargs)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make
