"""Shared fixtures: in-memory database, fake collaborators and repositories."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("INTERNAL_SECRET", "test-internal-secret")

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from config import SecurityConfig
from models import Base
from routers.users.repository import UserRepository
from routers.users.schemas import UserCreate, UserCreateStatus
from routers.products.repository import ProductRepository
from routers.products.schemas import ProductCreate
from routers.applications.repository import ApplicationRepository
from routers.applications.schemas import ApplicationCreate

INTERNAL_SECRET = os.environ["INTERNAL_SECRET"]
DEFAULT_PASSWORD = "12345678"


class FakeEmailClient:
    """Records emails instead of sending them"""

    def __init__(self, result=(True, None)):
        self.result = result
        self.sent = []

    def send_email(self, to_email, subject, body):
        self.sent.append((to_email, subject, body))
        return self.result


class FakeImageWriter:
    """Pretends to store images and remembers what happened"""

    def __init__(self, error=None):
        self.error = error
        self.uploaded = []
        self.deleted = []

    async def upload_image(self, folder, file):
        if self.error is not None:
            raise self.error
        url = f"https://storage.test/pollopollo-media/{folder}/{len(self.uploaded) + 1}.png"
        self.uploaded.append(url)
        return url

    def delete_image(self, folder, image_url):
        self.deleted.append(image_url)
        return True


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._body = body

    def json(self):
        return self._body


class FakeChatbot:
    """Stands in for the chatbot and records requested accounts"""

    def __init__(self, response):
        self.response = response
        self.requested = []

    def get_donor_balance(self, aa_account):
        self.requested.append(aa_account)
        return self.response


@pytest.fixture
def security_config():
    return SecurityConfig(
        secret=os.environ["JWT_SECRET_KEY"],
        device_address="AymLnfCdnKSzNHwMFdGnTmGllPdv6Qxgz1fHfbkEcDKo",
        obyte_hub="obyte.org/bb",
    )


@pytest.fixture
def email_client():
    return FakeEmailClient()


@pytest.fixture
def image_writer():
    return FakeImageWriter()


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory SQLite database with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_repository(security_config, image_writer, db):
    return UserRepository(security_config, image_writer, db)


@pytest.fixture
def product_repository(db, image_writer):
    return ProductRepository(db, image_writer)


@pytest.fixture
def application_repository(email_client, db):
    return ApplicationRepository(email_client, db)


@pytest.fixture
def make_user(user_repository):
    """Factory creating a user through the repository, returns the TokenResponse."""
    async def _make_user(email="receiver@example.com", role="Receiver", **fields):
        data = {
            "first_name": "Test",
            "sur_name": "User",
            "email": email,
            "password": DEFAULT_PASSWORD,
            "country": "Denmark",
            "user_role": role,
        }
        data.update(fields)
        status, token = await user_repository.create(UserCreate(**data))
        assert status == UserCreateStatus.SUCCESS
        return token
    return _make_user


@pytest.fixture
def make_product(product_repository):
    async def _make_product(user_id, title="Chickens", price=42, **fields):
        product = await product_repository.create(
            ProductCreate(user_id=user_id, title=title, price=price, **fields)
        )
        assert product is not None
        return product
    return _make_product


@pytest.fixture
def make_application(application_repository):
    async def _make_application(user_id, product_id, motivation="I need this"):
        application = await application_repository.create(
            ApplicationCreate(user_id=user_id, product_id=product_id, motivation=motivation)
        )
        assert application is not None
        return application
    return _make_application


@pytest_asyncio.fixture
async def donation_setup(make_user, make_product, make_application):
    """A producer in Copenhagen with one product and one open application for it."""
    producer = await make_user(
        email="producer@example.com",
        role="Producer",
        street="Rued Langgaards Vej",
        street_number="7",
        zipcode="2300",
        city="Copenhagen",
    )
    receiver = await make_user(email="receiver@example.com", role="Receiver")
    product = await make_product(producer.user_dto.user_id)
    application = await make_application(receiver.user_dto.user_id, product.product_id)
    return {
        "producer": producer.user_dto,
        "receiver": receiver.user_dto,
        "product": product,
        "application": application,
    }
