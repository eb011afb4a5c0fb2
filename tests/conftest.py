import httpx
import pytest

from batchcart.core.config import Settings
from batchcart.services import StorefrontClient
from helpers import BASE_URL, HEALTH_URL, ManualScheduler
from mock_storefront import StorefrontDatabase, create_app


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def db():
    return StorefrontDatabase()


@pytest.fixture
def app(db):
    return create_app(db)


@pytest.fixture
async def client(app):
    client = StorefrontClient(
        BASE_URL,
        health_url=HEALTH_URL,
        transport=httpx.ASGITransport(app=app),
    )
    yield client
    await client.close()


@pytest.fixture
def products(db):
    return dict(db.products)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base_url=BASE_URL,
        health_url=HEALTH_URL,
        cart_store_path=str(tmp_path / "cart.json"),
        admin_username=StorefrontDatabase.ADMIN_USERNAME,
        admin_password=StorefrontDatabase.ADMIN_PASSWORD,
    )
