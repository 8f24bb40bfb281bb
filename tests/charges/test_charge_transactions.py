from domain.charge.entity import Charge
from tests.fakes import make_charge, make_transaction


def test_add_transaction_deduplicates_by_gateway_id():
    charge = make_charge()
    result = charge.add_transaction(make_transaction(1))
    charge.add_transaction(make_transaction(1, at=50))
    assert result is charge
    assert len(charge.transactions) == 1
    # first one wins
    assert charge.transactions[0].created_at == make_transaction(1).created_at


def test_transactions_returns_a_copy():
    charge = make_charge()
    charge.add_transaction(make_transaction(1))
    charge.transactions.append(make_transaction(2))
    assert len(charge.transactions) == 1


def test_update_transaction_keeps_local_id_when_overwriting():
    charge = make_charge()
    charge.add_transaction(make_transaction(1, id=42, status="pending"))
    charge.add_transaction(make_transaction(2, id=43))

    replacement = make_transaction(1, id=None, status="captured")
    charge.update_transaction(replacement, overwrite_id=True)

    assert len(charge.transactions) == 2
    assert charge.transactions[0].id == 42
    assert charge.transactions[0].status == "captured"


def test_update_transaction_without_overwrite_takes_replacement_id():
    charge = make_charge()
    charge.add_transaction(make_transaction(1, id=42))
    charge.update_transaction(make_transaction(1, id=7))
    assert charge.transactions[0].id == 7


def test_update_unknown_transaction_appends():
    charge = make_charge()
    charge.add_transaction(make_transaction(1))
    charge.update_transaction(make_transaction(2), overwrite_id=True)
    assert [str(t.gateway_id) for t in charge.transactions] == [
        "tran_0000000000000001",
        "tran_0000000000000002",
    ]


def test_last_transaction_empty_is_none():
    assert Charge().last_transaction is None


def test_last_transaction_picks_newest_and_first_on_ties():
    charge = make_charge()
    first = make_transaction(1, at=5)
    second = make_transaction(2, at=9)
    third = make_transaction(3, at=9)
    for t in (first, second, third):
        charge.add_transaction(t)
    assert charge.last_transaction is second


def test_last_transaction_ignores_insertion_order():
    charge = make_charge()
    charge.add_transaction(make_transaction(1, at=30))
    charge.add_transaction(make_transaction(2, at=10))
    assert str(charge.last_transaction.gateway_id) == "tran_0000000000000001"


def test_constructor_deduplicates_restored_transactions():
    charge = Charge(transactions=[make_transaction(1), make_transaction(1), make_transaction(2)])
    assert len(charge.transactions) == 2
