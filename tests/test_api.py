"""End to end tests of the HTTP API with an in-memory database."""

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from config import get_db
from main import app
from routers.users.helpers import get_image_writer
from utils.notifications import get_email_client
from utils.chatbot import get_chatbot_client
from conftest import INTERNAL_SECRET, DEFAULT_PASSWORD, FakeChatbot, FakeResponse

INTERNAL_HEADERS = {"X-Internal-Secret": INTERNAL_SECRET}


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(engine, email_client, image_writer):
    """HTTP client talking to the app with all outside services replaced."""
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_client] = lambda: email_client
    app.dependency_overrides[get_image_writer] = lambda: image_writer
    app.dependency_overrides[get_chatbot_client] = lambda: FakeChatbot(FakeResponse(200, 1_000_000_000))

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def register(client, email, role, **fields):
    data = {
        "first_name": "Test",
        "sur_name": "User",
        "email": email,
        "password": DEFAULT_PASSWORD,
        "country": "Denmark",
        "user_role": role,
    }
    data.update(fields)
    response = await client.post("/auth/register", json=data)
    assert response.status_code == 201
    return response.json()


@pytest_asyncio.fixture
async def producer(client):
    return await register(client, "producer@example.com", "Producer", street="Main", street_number="1", city="Aarhus")


@pytest_asyncio.fixture
async def receiver(client):
    return await register(client, "receiver@example.com", "Receiver")


@pytest_asyncio.fixture
async def product(client, producer):
    response = await client.post(
        "/products",
        json={"user_id": producer["user_dto"]["user_id"], "title": "Chickens", "price": 42},
        headers=auth_headers(producer["token"]),
    )
    assert response.status_code == 201
    return response.json()


@pytest_asyncio.fixture
async def application(client, receiver, product):
    response = await client.post(
        "/applications",
        json={"user_id": receiver["user_dto"]["user_id"], "product_id": product["product_id"], "motivation": "Please"},
        headers=auth_headers(receiver["token"]),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_home_points_to_docs(client):
    """Test the root route names the service and its documentation."""
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"service": "PolloPollo API", "version": "1.0.0", "docs": "/docs", "redoc": "/redoc"}


@pytest.mark.asyncio
async def test_register_and_get_me(client, receiver):
    """Test a registered user can read its own profile."""
    assert receiver["user_dto"]["user_role"] == "Receiver"

    response = await client.get("/users/me", headers=auth_headers(receiver["token"]))

    assert response.status_code == 200
    assert response.json()["email"] == "receiver@example.com"


@pytest.mark.asyncio
async def test_register_errors(client, receiver):
    """Test registration status codes."""
    duplicate = await client.post("/auth/register", json={
        "first_name": "A", "sur_name": "B", "email": "receiver@example.com",
        "password": DEFAULT_PASSWORD, "country": "Denmark", "user_role": "Receiver",
    })
    assert duplicate.status_code == 409

    short_password = await client.post("/auth/register", json={
        "first_name": "A", "sur_name": "B", "email": "new@example.com",
        "password": "short", "country": "Denmark", "user_role": "Receiver",
    })
    assert short_password.status_code == 400


@pytest.mark.asyncio
async def test_login(client, receiver):
    """Test logging in with right and wrong passwords."""
    ok = await client.post("/auth/login", json={"email": "receiver@example.com", "password": DEFAULT_PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["token"]

    wrong = await client.post("/auth/login", json={"email": "receiver@example.com", "password": "wrong-password"})
    assert wrong.status_code == 400
    assert wrong.json()["status"] == "WRONG_PASSWORD"


@pytest.mark.asyncio
async def test_profile_requires_token(client):
    """Test reading a profile without a token."""
    response = await client.get("/users/me")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_update_other_user_is_forbidden(client, producer, receiver):
    """Test a user cannot update someone else."""
    producer_id = producer["user_dto"]["user_id"]

    response = await client.put(
        f"/users/{producer_id}",
        json={
            "user_id": producer_id, "email": "producer@example.com", "password": DEFAULT_PASSWORD,
            "first_name": "Evil", "sur_name": "User", "country": "Denmark", "user_role": "Producer",
        },
        headers=auth_headers(receiver["token"]),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_counts(client, producer, receiver):
    """Test the public producer and receiver counters."""
    assert (await client.get("/users/producers/count")).json() == {"count": 1}
    assert (await client.get("/users/receivers/count")).json() == {"count": 1}


@pytest.mark.asyncio
async def test_wallet_pairing_needs_internal_secret(client, producer):
    """Test only the chatbot may pair devices."""
    pairing = {"pairing_secret": "unknown", "device_address": "DEVICE", "wallet_address": "WALLET"}

    assert (await client.post("/users/wallet", json=pairing)).status_code == 403
    assert (await client.post("/users/wallet", json=pairing, headers=INTERNAL_HEADERS)).status_code == 404

    pairing["pairing_secret"] = producer["user_dto"]["pairing_link"].split("#", 1)[1]
    assert (await client.post("/users/wallet", json=pairing, headers=INTERNAL_HEADERS)).status_code == 204


@pytest.mark.asyncio
async def test_products(client, product, producer, receiver):
    """Test product creation rules and listings."""
    listing = (await client.get("/products")).json()
    assert listing["count"] == 1
    assert listing["list"][0]["title"] == "Chickens"

    response = await client.post(
        "/products",
        json={"user_id": receiver["user_dto"]["user_id"], "title": "Goat", "price": 10},
        headers=auth_headers(receiver["token"]),
    )
    assert response.status_code == 403

    assert (await client.get(f"/products/{product['product_id']}")).status_code == 200
    assert (await client.get("/products/999")).status_code == 404
    assert (await client.get("/products/producer/999")).status_code == 404
    assert len((await client.get(f"/products/producer/{producer['user_dto']['user_id']}")).json()) == 1


@pytest.mark.asyncio
async def test_update_product(client, product, producer):
    """Test the owner can take a product off the list."""
    response = await client.put(
        f"/products/{product['product_id']}",
        json={"id": product["product_id"], "available": False},
        headers=auth_headers(producer["token"]),
    )

    assert response.status_code == 204
    assert (await client.get("/products")).json()["count"] == 0


@pytest.mark.asyncio
async def test_donation_flow(client, application, receiver, email_client):
    """Test an application going from Open through Pending to Completed."""
    application_id = application["application_id"]

    listing = (await client.get("/applications")).json()
    assert listing["count"] == 1

    pending = await client.put(
        "/applications",
        json={"application_id": application_id, "status": "Pending"},
        headers=INTERNAL_HEADERS,
    )
    assert pending.status_code == 200
    assert pending.json() == {"status_changed": True, "email_sent": True, "email_error": None}
    assert email_client.sent[0][1] == "You received a donation on PolloPollo!"

    assert (await client.delete(
        f"/applications/{application_id}", headers=auth_headers(receiver["token"])
    )).status_code == 403

    completed = await client.put(
        "/applications",
        json={"application_id": application_id, "status": "Completed"},
        headers=auth_headers(receiver["token"]),
    )
    assert completed.status_code == 200

    done = (await client.get("/applications/completed")).json()
    assert done["count"] == 1
    assert done["list"][0]["status"] == "Completed"


@pytest.mark.asyncio
async def test_update_application_requires_owner(client, application, producer):
    """Test neither anonymous callers nor producers can change applications."""
    body = {"application_id": application["application_id"], "status": "Pending"}

    assert (await client.put("/applications", json=body)).status_code == 401
    assert (await client.put("/applications", json=body, headers=auth_headers(producer["token"]))).status_code == 403


@pytest.mark.asyncio
async def test_receiver_can_only_confirm_pending_applications(client, application, receiver, email_client):
    """Test a receiver cannot skip or undo the donation steps."""
    application_id = application["application_id"]
    headers = auth_headers(receiver["token"])

    skipped = await client.put(
        "/applications", json={"application_id": application_id, "status": "Completed"}, headers=headers
    )
    assert skipped.status_code == 409

    donated = await client.put(
        "/applications", json={"application_id": application_id, "status": "Pending"}, headers=headers
    )
    assert donated.status_code == 409
    assert email_client.sent == []

    opened = (await client.get(f"/applications/{application_id}")).json()
    assert opened["status"] == "Open"
    assert opened["date_of_donation"] is None

    await client.put(
        "/applications",
        json={"application_id": application_id, "status": "Pending", "unit_id": "bytes"},
        headers=INTERNAL_HEADERS,
    )
    confirmed = await client.put(
        "/applications",
        json={"application_id": application_id, "status": "Completed", "unit_id": "changed"},
        headers=headers,
    )
    assert confirmed.status_code == 200

    reverted = await client.put(
        "/applications", json={"application_id": application_id, "status": "Pending"}, headers=headers
    )
    assert reverted.status_code == 409

    completed = (await client.get(f"/applications/{application_id}")).json()
    assert completed["status"] == "Completed"
    assert completed["unit_id"] == "bytes"
    assert [subject for _, subject, _ in email_client.sent] == [
        "You received a donation on PolloPollo!", "Thank you for using PolloPollo"
    ]


@pytest.mark.asyncio
async def test_delete_application(client, application, receiver):
    """Test the receiver can delete its open application."""
    response = await client.delete(
        f"/applications/{application['application_id']}", headers=auth_headers(receiver["token"])
    )

    assert response.status_code == 204
    assert (await client.get(f"/applications/{application['application_id']}")).status_code == 404


@pytest.mark.asyncio
async def test_application_filters(client, application):
    """Test the location lists and the filter endpoint."""
    assert (await client.get("/applications/countries")).json() == ["Denmark"]
    assert (await client.get("/applications/cities", params={"country": "Denmark"})).json() == ["Aarhus"]

    filtered = (await client.get("/applications/filter", params={"country": "Denmark", "city": "Aarhus"})).json()
    assert filtered["count"] == 1
    assert (await client.get("/applications/filter", params={"city": "Odense"})).json()["count"] == 0


@pytest.mark.asyncio
async def test_contract_information_is_internal(client, application):
    """Test contract information is only given to the chatbot."""
    path = f"/applications/contractinfo/{application['application_id']}"

    assert (await client.get(path)).status_code == 403

    response = await client.get(path, headers=INTERNAL_HEADERS)
    assert response.status_code == 200
    assert response.json()["price"] == 42


@pytest.mark.asyncio
async def test_donors(client):
    """Test donor registration, balance and removal."""
    donor = {"aa_account": "AA_ACCOUNT", "wallet_address": "WALLET"}

    assert (await client.post("/donors", json=donor)).status_code == 403
    assert (await client.post("/donors", json=donor, headers=INTERNAL_HEADERS)).status_code == 201
    repeated = await client.post("/donors", json=donor, headers=INTERNAL_HEADERS)
    assert repeated.status_code == 200
    assert repeated.json() == {"created": False, "exists": True}

    rate = await client.put("/donors/exchangerate", json={"gbyte_usd": "30"}, headers=INTERNAL_HEADERS)
    assert rate.status_code == 200

    balance = (await client.get("/donors/balance/AA_ACCOUNT")).json()
    assert balance["balance_in_bytes"] == 1_000_000_000
    assert float(balance["balance_in_usd"]) == 30.0

    assert (await client.delete("/donors/AA_ACCOUNT", headers=INTERNAL_HEADERS)).status_code == 204
    assert (await client.delete("/donors/AA_ACCOUNT", headers=INTERNAL_HEADERS)).status_code == 404
