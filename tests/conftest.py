import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENABLE_SCHEDULER", "false")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.auth import create_access_token  # noqa: E402
from app.db import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.plan import SubscriptionPlan  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db_session, email):
    user = User(email=email)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session):
    return _make_user(db_session, "test@example.com")


@pytest.fixture
def second_user(db_session):
    return _make_user(db_session, "second@example.com")


@pytest.fixture
def auth_client(db_session, test_user):
    """Create a test client with an authenticated user."""
    # Create access token (sub must be string)
    token = create_access_token(data={"sub": str(test_user.id)})

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        test_client.headers["Authorization"] = f"Bearer {token}"
        test_client.test_user = test_user  # Attach user for assertions
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def second_auth_client(db_session, second_user):
    """Create a test client with a second authenticated user (for isolation tests)."""
    token = create_access_token(data={"sub": str(second_user.id)})

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        test_client.headers["Authorization"] = f"Bearer {token}"
        test_client.test_user = second_user
        yield test_client
    app.dependency_overrides.clear()


def make_plan(db_session, name, price, interval, currency="USD", is_active=True, display_order=0):
    plan = SubscriptionPlan(
        name=name,
        price=Decimal(str(price)),
        currency=currency,
        interval=interval,
        is_active=is_active,
        display_order=display_order,
    )
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


@pytest.fixture
def monthly_plan(db_session):
    return make_plan(db_session, "Monthly", "10.00", "monthly", display_order=1)


@pytest.fixture
def yearly_plan(db_session):
    return make_plan(db_session, "Yearly", "100.00", "yearly", display_order=3)


@pytest.fixture
def quarterly_plan(db_session):
    return make_plan(db_session, "Quarterly", "27.00", "quarterly", display_order=2)


@pytest.fixture
def plan_factory(db_session):
    """Create catalog plans on demand: plan_factory("Gold", "49.00", "yearly")."""
    def factory(name, price, interval, **kwargs):
        return make_plan(db_session, name, price, interval, **kwargs)

    return factory
