from starlette import status as http_status

from core.exceptions import business_code_to_http_status
from core.response import error_response, success_response
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


def test_business_codes_map_to_http_status():
    assert business_code_to_http_status(BusinessCode.PARAM_VALIDATION_ERROR) == http_status.HTTP_422_UNPROCESSABLE_ENTITY
    assert business_code_to_http_status(BusinessCode.INVALID_OPERATION) == http_status.HTTP_409_CONFLICT
    assert business_code_to_http_status(BusinessCode.CHARGE_NOT_FOUND) == http_status.HTTP_404_NOT_FOUND
    assert business_code_to_http_status(BusinessCode.SERVICE_UNAVAILABLE) == http_status.HTTP_503_SERVICE_UNAVAILABLE


def test_payment_codes_map_to_gateway_statuses():
    assert business_code_to_http_status(PaymentCode.PROVIDER_ERROR) == http_status.HTTP_502_BAD_GATEWAY
    assert business_code_to_http_status(PaymentCode.TIMEOUT) == http_status.HTTP_504_GATEWAY_TIMEOUT
    assert business_code_to_http_status(PaymentCode.RATE_LIMITED) == http_status.HTTP_429_TOO_MANY_REQUESTS


def test_unknown_code_defaults_to_400():
    assert business_code_to_http_status(12345) == http_status.HTTP_400_BAD_REQUEST


def test_error_response_serializes_utc_timestamp():
    resp = error_response(code=BusinessCode.NOT_FOUND, message="x", locale="en", message_key="k")
    dumped = resp.model_dump(mode="json")
    assert dumped["error"]["timestamp"].endswith("Z")
    assert dumped["error"]["message_key"] == "k"
    assert success_response(data={"a": 1}).code == BusinessCode.SUCCESS
