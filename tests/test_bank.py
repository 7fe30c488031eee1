import pytest

from vaultkit.bank import Bank
from vaultkit.ledger import AuthorizationError, Ledger, LedgerError


@pytest.fixture
def setup():
    ledger = Ledger()
    bank, badge = Bank.instantiate(ledger)
    return ledger, bank, badge


def test_initial_split(setup):
    _, bank, badge = setup
    assert bank.balances() == (500, 500)
    assert badge.amount == 1


def test_deposit_moves_cash_to_bank(setup):
    _, bank, _ = setup
    before_bank, before_cash = bank.balances()
    bank.bank_deposit(100)
    after_bank, after_cash = bank.balances()
    assert after_bank - before_bank == 100
    assert before_cash - after_cash == 100


def test_deposit_too_much(setup):
    _, bank, _ = setup
    with pytest.raises(LedgerError, match="Your current balance is 500"):
        bank.bank_deposit(500)


def test_withdraw_requires_badge(setup):
    _, bank, _ = setup
    with pytest.raises(AuthorizationError):
        bank.bank_withdraw(10)


def test_withdraw_with_badge(setup):
    ledger, bank, badge = setup
    with ledger.auth_zone(badge.create_proof()):
        bank.bank_withdraw(10)
    bank_amount, cash_amount = bank.balances()
    assert bank_amount + cash_amount == 1000
    assert cash_amount - 500 == 10