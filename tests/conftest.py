"""
Shared fixtures.

The app runs against an in-memory MongoDB (mongomock-motor) and is driven
through httpx's ASGI transport, so the lifespan hook (real Motor client,
redis) never runs. The authenticated principal is injected by overriding
the fastapi-users dependency.
"""
import os

os.environ["ALLOWED_IPS"] = ""
os.environ["RATE_LIMITING_ENABLED"] = "false"
os.environ["CLIENT_URL"] = "http://shop.test"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_PUBLISHABLE_KEY"] = "pk_test_dummy"

from types import SimpleNamespace

import pytest
import stripe
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from storefront.commonUtils.enumUtils import UserRole
from storefront.config.database import startDB
from storefront.crud.userService import current_active_user
from storefront.main import app
from storefront.models.productModel import Product
from storefront.models.userModel import User


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    await startDB(client)
    yield client


@pytest.fixture
async def customer(db):
    user = User(email="buyer@example.com", hashed_password="not-a-real-hash", name="Buyer")
    await user.insert()
    return user


@pytest.fixture
async def other_customer(db):
    user = User(email="someone.else@example.com", hashed_password="not-a-real-hash", name="Other")
    await user.insert()
    return user


@pytest.fixture
async def admin(db):
    user = User(
        email="admin@example.com",
        hashed_password="not-a-real-hash",
        name="Admin",
        role=UserRole.ADMIN,
    )
    await user.insert()
    return user


@pytest.fixture
def make_product(db):
    async def _make(**overrides) -> Product:
        data = {
            "name": "Arabica Coffee",
            "description": "Single origin beans",
            "price": 10.0,
            "image": "https://cdn.example.com/coffee.png",
            "category": "coffee",
            "stock": 5,
        }
        data.update(overrides)
        product = Product(**data)
        await product.insert()
        return product

    return _make


async def _client_for(user):
    app.dependency_overrides[current_active_user] = lambda: user
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
async def client(customer):
    async with await _client_for(customer) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(admin):
    async with await _client_for(admin) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def fake_stripe(monkeypatch):
    """
    Replace the two Stripe Checkout calls with in-memory fakes.

    `created` records the keyword arguments of every create call;
    `sessions` maps session ids to the objects retrieve returns.
    """
    state = SimpleNamespace(created=[], sessions={})

    def fake_create(**params):
        session_id = f"cs_test_{len(state.created) + 1}"
        state.created.append(params)
        return SimpleNamespace(id=session_id, url=f"https://checkout.stripe.test/{session_id}")

    def fake_retrieve(session_id, **params):
        if session_id not in state.sessions:
            raise stripe.InvalidRequestError(f"No such checkout.session: '{session_id}'", "id")
        return state.sessions[session_id]

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)
    return state
