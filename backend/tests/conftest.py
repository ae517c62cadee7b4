import os

# point the app at SQLite before anything imports billing_dashboard.database
os.environ["DATABASE_URL"] = "sqlite:///./test_billing.db"
os.environ["INIT_DATABASE"] = "0"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from billing_dashboard.main import app as fastapi_app
from billing_dashboard.database import Base
from billing_dashboard.deps import get_db
from billing_dashboard.models.project import Project
from billing_dashboard.models.gateway import PaymentGateway
from billing_dashboard.models.customer import Customer
from billing_dashboard.models.transaction import Transaction
from billing_dashboard.models.subscription import Subscription
from billing_dashboard.models.snapshot import DailyRevenueSnapshot
from billing_dashboard.models.logs import AuditLog, WebhookLog
from billing_dashboard.models import views  # noqa: F401

SQLALCHEMY_DATABASE_URL = "sqlite:///./test_billing.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)

# fixed "now" so every window in the tests is reproducible
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def days_ago(n, hours=0):
    return NOW - timedelta(days=n, hours=hours)


class Seeder:
    """Inserts rows the way the external ingestion system would."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self, prefix):
        self._seq += 1
        return f"{prefix}_{self._seq}"

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def project(self, name="Acme", currency="USD", created_at=None):
        return self._save(Project(name=name, currency=currency, created_at=created_at or NOW))

    def gateway(self, project, name="stripe", **kw):
        return self._save(PaymentGateway(
            project_id=project.id,
            gateway_name=name,
            gateway_type=kw.pop("gateway_type", "one_time"),
            live_credentials=kw.pop("live_credentials", {"secret_key": "sk_live_x"}),
            webhook_secret=kw.pop("webhook_secret", "whsec_x"),
            **kw,
        ))

    def customer(self, project, name=None, email=None, created_at=None):
        return self._save(Customer(
            project_id=project.id,
            external_id=self._next("cus"),
            name=name,
            email=email,
            created_at=created_at or NOW,
        ))

    def transaction(self, project, gateway, amount, fee=0, status="succeeded",
                    type="payment", customer=None, created_at=None, external_id=None):
        return self._save(Transaction(
            project_id=project.id,
            gateway_id=gateway.id,
            gateway_name=gateway.gateway_name,
            customer_id=customer.id if customer else None,
            external_id=external_id or self._next("pi"),
            type=type,
            status=status,
            amount=amount,
            fee_amount=fee,
            currency=project.currency,
            created_at=created_at or NOW,
        ))

    def subscription(self, project, customer, gateway, amount, status="active",
                     cancel_at_period_end=False, created_at=None, **kw):
        return self._save(Subscription(
            project_id=project.id,
            customer_id=customer.id,
            gateway_id=gateway.id,
            external_id=self._next("sub"),
            amount=amount,
            currency=project.currency,
            status=status,
            cancel_at_period_end=cancel_at_period_end,
            created_at=created_at or NOW,
            **kw,
        ))

    def snapshot(self, project, day, **counters):
        return self._save(DailyRevenueSnapshot(project_id=project.id, date=day, **counters))

    def audit(self, project, entity_type="transaction", action="created", created_at=None, **kw):
        return self._save(AuditLog(
            project_id=project.id, entity_type=entity_type, action=action,
            created_at=created_at or NOW, **kw,
        ))

    def webhook(self, project, status="processed", event_type="payment_intent.succeeded",
                created_at=None, **kw):
        return self._save(WebhookLog(
            project_id=project.id, gateway_name="stripe", status=status,
            event_type=event_type, created_at=created_at or NOW, **kw,
        ))


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    return Seeder(db)


def override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def override_db():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    # no context manager: the startup hook (database creation) stays off in tests
    yield TestClient(fastapi_app)
