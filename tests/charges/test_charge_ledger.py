import pytest

from domain.charge.entity import Charge
from domain.common.exceptions import InvalidParamException
from tests.fakes import make_charge


def test_amount_accepts_non_negative_values():
    charge = make_charge(amount=0)
    charge.amount = 1500
    assert charge.amount == 1500


@pytest.mark.parametrize("bad", [-1, -1000])
def test_negative_amount_raises_and_keeps_previous(bad):
    charge = make_charge(amount=1000)
    with pytest.raises(InvalidParamException) as exc:
        charge.amount = bad
    assert exc.value.message == "Amount should be greater or equal to 0!"
    assert exc.value.message_key == "charge.amount.negative"
    assert charge.amount == 1000


@pytest.mark.parametrize("bad", [10.5, "100", None, True])
def test_non_integer_amount_raises(bad):
    charge = make_charge(amount=1000)
    with pytest.raises(InvalidParamException):
        charge.amount = bad
    assert charge.amount == 1000


@pytest.mark.parametrize("attr", ["paid_amount", "canceled_amount", "refunded_amount"])
@pytest.mark.parametrize("bad", [700.9, "700", True])
def test_clamping_setters_reject_non_integers(attr, bad):
    charge = make_charge(amount=1000)
    charge.paid_amount = 500
    with pytest.raises(InvalidParamException) as exc:
        setattr(charge, attr, bad)
    assert exc.value.message_key == "charge.amount.not_integer"
    assert charge.paid_amount == 500


def test_pay_with_fractional_amount_is_rejected():
    charge = make_charge(amount=1000)
    with pytest.raises(InvalidParamException):
        charge.pay(700.9)
    assert charge.is_pending
    assert charge.paid_amount == 0


def test_constructor_rejects_negative_amount():
    with pytest.raises(InvalidParamException):
        Charge(amount=-5)


def test_unset_amounts_read_as_zero():
    charge = Charge()
    assert charge.amount == 0
    assert charge.paid_amount == 0
    assert charge.canceled_amount == 0
    assert charge.refunded_amount == 0


@pytest.mark.parametrize("value,expected", [(-50, 0), (0, 0), (400, 400), (1000, 1000), (5000, 1000)])
def test_canceled_amount_is_clamped_to_amount(value, expected):
    charge = make_charge(amount=1000)
    charge.canceled_amount = value
    assert charge.canceled_amount == expected


@pytest.mark.parametrize("value,expected", [(-1, 0), (300, 300), (700, 700), (900, 700)])
def test_refunded_amount_is_clamped_to_paid(value, expected):
    charge = make_charge(amount=1000)
    charge.paid_amount = 700
    charge.refunded_amount = value
    assert charge.refunded_amount == expected


def test_refunded_amount_without_paid_is_zero():
    charge = make_charge(amount=1000)
    charge.refunded_amount = 200
    assert charge.refunded_amount == 0


def test_negative_paid_amount_clamps_to_zero():
    charge = make_charge(amount=1000)
    charge.paid_amount = -10
    assert charge.paid_amount == 0


def test_lowering_amount_reclamps_canceled():
    charge = make_charge(amount=1000)
    charge.canceled_amount = 800
    charge.amount = 500
    assert charge.canceled_amount == 500


def test_lowering_paid_reclamps_refunded():
    charge = make_charge(amount=1000)
    charge.paid_amount = 700
    charge.refunded_amount = 600
    charge.paid_amount = 400
    assert charge.refunded_amount == 400


def test_derived_amounts():
    charge = make_charge(amount=1000)
    charge.pay(700)
    charge.cancel(200)
    assert charge.outstanding_amount == 0
    assert charge.net_paid_amount == 500

    pending = make_charge(amount=1000)
    assert pending.outstanding_amount == 1000
