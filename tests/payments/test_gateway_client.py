import base64
import json

import httpx
import pytest

from application.dtos.payments import CreateCardPaymentRequest, CreatePaymentRequest
from core.settings import GatewaySettings, PaymentRetry, PaymentSettings
from infrastructure.external.payments.exceptions import PaymentProviderError, PaymentRecoverableError
from infrastructure.external.payments.gateway_client import GatewayPaymentClient
from shared.codes.payment_codes import PaymentCode


CHARGE = {
    "id": "ch_Ab12Cd34Ef56Gh78",
    "status": "paid",
    "amount": 1000,
    "paid_amount": 700,
    "last_transaction": {
        "id": "tran_Ab12Cd34Ef56Gh78",
        "transaction_type": "credit_card",
        "status": "captured",
        "amount": 700,
        "gateway_response": {"code": "200"},
    },
}


def _client(handler, retries: int = 0) -> GatewayPaymentClient:
    settings = PaymentSettings(
        gateway=GatewaySettings(base_url="https://gateway.test/core/v1", secret_key="sk_test"),
        retry=PaymentRetry(max=retries, base_backoff=0.0),
    )
    return GatewayPaymentClient(settings, transport=httpx.MockTransport(handler))


def test_missing_secret_key_is_a_configuration_error():
    with pytest.raises(RuntimeError):
        GatewayPaymentClient(PaymentSettings(gateway=GatewaySettings(secret_key=None)))


@pytest.mark.asyncio
async def test_capture_posts_amount_with_basic_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json=CHARGE)

    client = _client(handler)
    try:
        result = await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 700)
    finally:
        await client.aclose()

    assert seen["method"] == "POST"
    assert seen["url"] == "https://gateway.test/core/v1/charges/ch_Ab12Cd34Ef56Gh78/capture"
    assert seen["body"] == {"amount": 700}
    assert seen["auth"] == "Basic " + base64.b64encode(b"sk_test:").decode()
    assert result.status == "paid"
    assert result.paid_amount == 700
    # only ledger-relevant transaction fields are kept
    assert set(result.last_transaction) == {"id", "transaction_type", "status", "amount"}


@pytest.mark.asyncio
async def test_cancel_uses_delete_and_maps_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.url.path.endswith("/charges/ch_Ab12Cd34Ef56Gh78")
        return httpx.Response(200, json={"id": "ch_Ab12Cd34Ef56Gh78", "status": "failed", "amount": 1000})

    client = _client(handler)
    result = await client.cancel_charge("ch_Ab12Cd34Ef56Gh78", 0)
    await client.aclose()
    assert result.status == "canceled"


@pytest.mark.asyncio
async def test_create_payment_sends_order_with_idempotency_header():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["key"] = request.headers.get("Idempotency-Key")
        return httpx.Response(200, json={"id": "or_Ab12Cd34Ef56Gh78", "charges": [dict(CHARGE, status="pending")]})

    req = CreatePaymentRequest(
        payment_method="voucher",
        amount=1000,
        voucher=CreateCardPaymentRequest(card_token="token_Ab12Cd34Ef56Gh78"),
        metadata={"saveOnSuccess": False},
        idempotency_key="abc",
    )
    client = _client(handler)
    result = await client.create_payment("ORDER-1", req)
    await client.aclose()

    assert seen["key"] == "abc"
    assert seen["body"]["code"] == "ORDER-1"
    payment = seen["body"]["payments"][0]
    assert payment["payment_method"] == "voucher"
    assert payment["voucher"]["card_token"] == "token_Ab12Cd34Ef56Gh78"
    assert "idempotency_key" not in payment
    assert result.status == "pending"


@pytest.mark.asyncio
async def test_client_error_maps_to_provider_error():
    def handler(request):
        return httpx.Response(422, json={"message": "The request is invalid.", "errors": {"amount": ["invalid"]}})

    client = _client(handler)
    with pytest.raises(PaymentProviderError) as exc:
        await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 1)
    await client.aclose()
    assert exc.value.message == "The request is invalid."
    assert exc.value.details["provider_code"] == "422"


@pytest.mark.asyncio
async def test_server_error_and_throttling_are_recoverable():
    responses = iter([httpx.Response(503), httpx.Response(429)])

    client = _client(lambda request: next(responses))
    with pytest.raises(PaymentRecoverableError) as first:
        await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 1)
    with pytest.raises(PaymentRecoverableError) as second:
        await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 1)
    await client.aclose()
    assert first.value.code == PaymentCode.PROVIDER_RECOVERABLE
    assert second.value.code == PaymentCode.RATE_LIMITED


@pytest.mark.asyncio
async def test_transport_errors_are_retried():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=CHARGE)

    client = _client(handler, retries=2)
    result = await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 700)
    await client.aclose()
    assert calls["n"] == 3
    assert result.gateway_id == "ch_Ab12Cd34Ef56Gh78"


@pytest.mark.asyncio
async def test_timeout_after_retries_is_recoverable():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client = _client(handler, retries=1)
    with pytest.raises(PaymentRecoverableError) as exc:
        await client.capture_charge("ch_Ab12Cd34Ef56Gh78", 700)
    await client.aclose()
    assert exc.value.code == PaymentCode.TIMEOUT
