import pytest

from core.settings import CardSettings
from domain.charge.value_objects import CustomerId
from domain.common.exceptions import InvalidParamException
from domain.payment import (
    CardId,
    CardToken,
    Customer,
    NewCreditCardPayment,
    NewVoucherPayment,
    PaymentMethod,
    PaymentOrder,
    SavedCreditCardPayment,
)


TOKEN = "token_Ab12Cd34Ef56Gh78"
CUSTOMER = Customer(id=CustomerId("cus_Ab12Cd34Ef56Gh78"), name="Ana", email="ana@example.com")


def _voucher(save_cards=True, **kwargs) -> NewVoucherPayment:
    payment = NewVoucherPayment(1000, config=CardSettings(save_cards=save_cards, max_installments=1, **kwargs))
    payment.set_card_token(CardToken(TOKEN))
    return payment


def test_base_code_is_payment_method():
    assert NewVoucherPayment.base_code() == "voucher"
    assert NewCreditCardPayment.base_code() == PaymentMethod.CREDIT_CARD.value


def test_installments_must_be_at_least_one():
    payment = _voucher()
    with pytest.raises(InvalidParamException) as exc:
        payment.installments = 0
    assert exc.value.message == "Installments should be at least 1"
    assert payment.installments == 1


def test_installments_above_module_limit_rejected():
    payment = NewCreditCardPayment(1000, config=CardSettings(max_installments=6))
    payment.installments = 6
    with pytest.raises(InvalidParamException):
        payment.installments = 7
    assert payment.installments == 6


def test_negative_amount_rejected():
    with pytest.raises(InvalidParamException):
        NewCreditCardPayment(-1, config=CardSettings())


@pytest.mark.parametrize(
    "with_order,save_cards,with_customer,flag,expected",
    [
        (True, True, True, True, True),
        (False, True, True, True, False),
        (True, False, True, True, False),
        (True, True, False, True, False),
        (True, True, True, False, False),
    ],
)
def test_save_on_success_requires_every_condition(with_order, save_cards, with_customer, flag, expected):
    payment = _voucher(save_cards=save_cards)
    if with_order:
        payment.order = PaymentOrder(code="ORDER-1", customer=CUSTOMER if with_customer else None)
    payment.set_save_on_success(flag)
    assert payment.is_save_on_success() is expected


def test_save_on_success_flag_is_coerced_to_bool():
    payment = _voucher()
    payment.order = PaymentOrder(code="ORDER-1", customer=CUSTOMER)
    payment.set_save_on_success("yes")
    assert payment.is_save_on_success() is True
    payment.set_save_on_success(0)
    assert payment.is_save_on_success() is False


def test_voucher_request_shape():
    payment = _voucher(statement_descriptor="SHOP")
    payment.order = PaymentOrder(code="ORDER-1", customer=CUSTOMER)
    payment.set_save_on_success(True)

    req = payment.to_request()
    assert req.payment_method == "voucher"
    assert req.amount == 1000
    assert req.credit_card is None
    assert req.voucher.card_token == TOKEN
    assert req.voucher.statement_descriptor == "SHOP"
    assert req.metadata == {"saveOnSuccess": True}


def test_credit_card_request_uses_credit_card_slot():
    payment = NewCreditCardPayment(500, config=CardSettings())
    payment.set_card_token(CardToken(TOKEN))
    payment.installments = 3
    payment.capture = False

    req = payment.to_request()
    assert req.voucher is None
    assert req.credit_card.installments == 3
    assert req.credit_card.capture is False
    assert req.metadata == {"saveOnSuccess": False}


def test_saved_card_payment_sends_card_id():
    payment = SavedCreditCardPayment(500, config=CardSettings())
    payment.set_card_id(CardId("card_Ab12Cd34Ef56Gh78"))
    req = payment.to_request()
    assert req.credit_card.card_id == "card_Ab12Cd34Ef56Gh78"
    assert req.credit_card.card_token is None
    assert req.metadata is None
    assert payment.to_dict()["card_id"] == "card_Ab12Cd34Ef56Gh78"


def test_customer_comes_from_order():
    payment = _voucher()
    assert payment.customer is None
    payment.order = PaymentOrder(code="ORDER-1", customer=CUSTOMER)
    assert payment.customer is CUSTOMER
    assert payment.to_dict()["order_code"] == "ORDER-1"
