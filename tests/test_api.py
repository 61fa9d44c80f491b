from decimal import Decimal

import httpx
import jwt
import pytest
import pytest_asyncio

from walletledger.db.session import create_schema
from walletledger.main import create_app
from tests.factories import create_user_with_wallet


def auth_header(phone: str, settings) -> dict:
    token = jwt.encode({"sub": phone, "iss": settings.jwt_issuer}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await create_schema(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def funded(app):
    accounts = app.state.account_service
    factory = app.state.session_factory
    await create_user_with_wallet(accounts, factory, phone="+100", balance="100.00")
    await create_user_with_wallet(accounts, factory, phone="+200")


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client):
    response = await client.get("/wallet/balance")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_rejected(client, settings, funded):
    token = jwt.encode({"sub": "+100", "iss": settings.jwt_issuer}, "not-the-secret", algorithm="HS256")
    response = await client.get("/wallet/balance", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_transfer_and_views_over_http(client, settings, funded):
    response = await client.post(
        "/transactions/transfer",
        json={"to_phone": "+200", "amount": "40.00"},
        headers=auth_header("+100", settings),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "SUCCESS"
    assert Decimal(body["amount"]) == Decimal("40.00")
    assert body["direction"] is None
    transaction_id = body["id"]

    balance = (await client.get("/wallet/balance", headers=auth_header("+100", settings))).json()
    assert Decimal(balance["balance"]) == Decimal("60.00")
    assert balance["status"] == "ACTIVE"

    sent = (await client.get("/transactions/sent", headers=auth_header("+100", settings))).json()
    assert [(entry["id"], entry["direction"]) for entry in sent] == [(transaction_id, "SENT")]

    received = (await client.get("/transactions/received", headers=auth_header("+200", settings))).json()
    assert [(entry["id"], entry["direction"]) for entry in received] == [(transaction_id, "RECEIVED")]

    history = (await client.get("/transactions/history", headers=auth_header("+200", settings))).json()
    assert len(history) == 1

    detail = await client.get(f"/transactions/{transaction_id}", headers=auth_header("+200", settings))
    assert detail.status_code == 200
    assert detail.json()["from_phone"] == "+100"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "to_phone, amount, status_code, code",
    [
        ("+100", "5.00", 400, "invalid_operation"),
        ("+200", "0.001", 400, "invalid_amount"),
        ("+200", 40.5, 400, "invalid_amount"),
        ("+200", "abc", 400, "invalid_amount"),
        ("+200", True, 400, "invalid_amount"),
        ("+200", None, 400, "invalid_amount"),
        ("+404", "5.00", 404, "wallet_not_found"),
        ("+200", "100.01", 422, "insufficient_funds"),
    ],
)
async def test_transfer_errors_map_to_status_codes(client, settings, funded, to_phone, amount, status_code, code):
    response = await client.post(
        "/transactions/transfer",
        json={"to_phone": to_phone, "amount": amount},
        headers=auth_header("+100", settings),
    )
    assert response.status_code == status_code
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_float_amount_is_refused_without_moving_money(client, settings, funded):
    response = await client.post(
        "/transactions/transfer",
        json={"to_phone": "+200", "amount": 40.5},
        headers=auth_header("+100", settings),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_amount"

    balance = (await client.get("/wallet/balance", headers=auth_header("+100", settings))).json()
    assert Decimal(balance["balance"]) == Decimal("100.00")
    history = (await client.get("/transactions/history", headers=auth_header("+100", settings))).json()
    assert history == []


@pytest.mark.asyncio
async def test_blocked_sender_gets_forbidden(app, client, settings, funded):
    from walletledger.models import AccountStatus

    await app.state.account_service.set_wallet_status("+100", AccountStatus.blocked)
    response = await client.post(
        "/transactions/transfer",
        json={"to_phone": "+200", "amount": "1.00"},
        headers=auth_header("+100", settings),
    )
    assert response.status_code == 403
    assert response.json()["code"] == "wallet_inactive"
