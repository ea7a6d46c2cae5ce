"""Tests for the wallet ledger."""
from decimal import Decimal

import pytest

from conftest import run
from services.wallet_service.models import Wallet
from services.wallet_service.service import WalletService, wallet_locks
from shared.errors import InsufficientBalanceError, ValidationError
from shared.storage import VersionConflictError, Write


def test_unknown_user_has_zero_balance(store):
    assert run(WalletService.get_balance(store, "nobody")) == Decimal("0")
    assert run(store.get("wallets", "nobody")) is None


def test_credit_accumulates(store):
    run(WalletService.credit(store, "user-1", Decimal("100")))
    wallet = run(WalletService.credit(store, "user-1", Decimal("250.50")))
    assert wallet.balance == Decimal("350.50")
    assert run(WalletService.get_balance(store, "user-1")) == Decimal("350.50")


@pytest.mark.parametrize("amount", ["0", "-5", "NaN"])
def test_credit_rejects_non_positive_amounts(store, amount):
    with pytest.raises(ValidationError) as exc_info:
        run(WalletService.credit(store, "user-1", Decimal(amount)))
    assert exc_info.value.field == "amount"


def test_recharge_minimum(store):
    with pytest.raises(ValidationError):
        run(WalletService.recharge(store, "user-1", 0.5))
    wallet = run(WalletService.recharge(store, "user-1", 1))
    assert wallet.balance == Decimal("1")


def test_debit_reduces_balance(store, fund):
    fund("user-1", 1000)
    wallet = run(WalletService.debit(store, "user-1", Decimal("400")))
    assert wallet.balance == Decimal("600")


def test_debit_never_goes_negative(store, fund):
    fund("user-1", 100)
    with pytest.raises(InsufficientBalanceError) as exc_info:
        run(WalletService.debit(store, "user-1", Decimal("100.01")))

    err = exc_info.value
    assert err.balance == Decimal("100")
    assert err.required == Decimal("100.01")
    assert err.shortfall == Decimal("0.01")
    assert run(WalletService.get_balance(store, "user-1")) == Decimal("100")


def test_debit_commits_with_companion_write(store, fund):
    fund("user-1", 500)
    receipt = lambda wallet: [Write("receipts", "r-1", wallet.model_dump_json(), 0)]

    wallet = run(WalletService.debit(store, "user-1", Decimal("200"), also=receipt))

    assert wallet.balance == Decimal("300")
    assert Wallet.model_validate_json(run(store.get("receipts", "r-1")).value) == wallet


def test_debit_is_dropped_when_companion_write_fails(store, fund):
    fund("user-1", 500)
    run(store.set("receipts", "r-1", "taken"))
    receipt = lambda wallet: [Write("receipts", "r-1", wallet.model_dump_json(), 0)]

    with pytest.raises(VersionConflictError):
        run(WalletService.debit(store, "user-1", Decimal("200"), also=receipt))
    assert run(WalletService.get_balance(store, "user-1")) == Decimal("500")


def test_locks_are_released(store):
    run(WalletService.credit(store, "user-1", Decimal("10")))
    assert not wallet_locks.is_held("user-1")
