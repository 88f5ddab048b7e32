import os

# Keep the app away from real infrastructure during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("KAFKA_ENABLED", "false")

from functools import lru_cache

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import cart as cart_api
from storefront.api.deps import get_db
from storefront.db.models import User, Store, StoreStatus, Product, Address
from storefront.db.session import Base
from storefront.kafka import producer
from storefront.main import app
from storefront.security.utils import create_access_token, hash_password

PASSWORD = "Password123"


@lru_cache(maxsize=None)
def password_hash() -> str:
    return hash_password(PASSWORD)


class InMemoryRedis:
    """Just enough of the redis client API for the cart store."""

    def __init__(self):
        self.hashes = {}

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def hset(self, key, mapping):
        self.hashes.setdefault(key, {}).update(mapping)

    def delete(self, key):
        self.hashes.pop(key, None)

    def pipeline(self):
        return _Pipeline(self)


class _Pipeline:
    def __init__(self, r):
        self.r = r
        self.ops = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.ops = []

    def delete(self, key):
        self.ops.append(("delete", (key,), {}))

    def hset(self, key, mapping):
        self.ops.append(("hset", (key,), {"mapping": mapping}))

    def execute(self):
        for name, args, kwargs in self.ops:
            getattr(self.r, name)(*args, **kwargs)
        self.ops = []


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture(autouse=True)
def events(monkeypatch):
    """Captured Kafka sends as (topic, key, value) tuples."""
    sent = []
    monkeypatch.setattr(producer, "send", lambda topic, key, value: sent.append((topic, key, value)))
    return sent


@pytest.fixture
def client(db, redis_client):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[cart_api.get_redis] = lambda: redis_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token, _ = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db):
    def _make(email="shopper@example.com", name="Shopper", role="customer"):
        user = User(name=name, email=email, password_hash=password_hash(), role=role)
        db.add(user); db.commit(); db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_store(db):
    def _make(owner, username="acme", approved=True):
        store = Store(
            user_id=owner.id,
            name=f"{username.title()} Store",
            username=username,
            description="A store used in tests",
            email=f"{username}@example.com",
            contact="+1 555 0100",
            address="1 Main Street",
            status=StoreStatus.APPROVED if approved else StoreStatus.PENDING,
            is_active=approved,
        )
        db.add(store); db.commit(); db.refresh(store)
        return store
    return _make


@pytest.fixture
def make_product(db):
    def _make(store, name="Widget", price_cents=1000, category="gadgets"):
        product = Product(
            store_id=store.id,
            name=name,
            description=f"{name} description",
            mrp_cents=price_cents + 500,
            price_cents=price_cents,
            category=category,
            images=[f"https://img.example.com/{name.lower()}.png"],
            in_stock=True,
        )
        db.add(product); db.commit(); db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_address(db):
    def _make(user):
        address = Address(
            user_id=user.id, name=user.name, email=user.email, phone="555-0101",
            street="2 Side Street", city="Springfield", state="IL", zip="62701", country="US",
        )
        db.add(address); db.commit(); db.refresh(address)
        return address
    return _make


@pytest.fixture
def vendor(make_user):
    return make_user(email="vendor@example.com", name="Vendor")


@pytest.fixture
def shopper(make_user):
    return make_user(email="shopper@example.com", name="Shopper")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", name="Admin", role="admin")


@pytest.fixture
def store(vendor, make_store):
    return make_store(vendor)


@pytest.fixture
def address(shopper, make_address):
    return make_address(shopper)
