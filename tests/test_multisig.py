from decimal import Decimal

import pytest

from vaultkit.ledger import Ledger, LedgerError
from vaultkit.multisig import MultiSigMaker


def test_multisig():
    ledger = Ledger()
    account1 = ledger.new_account(1000)
    account2 = ledger.new_account(1000)
    account3 = ledger.new_account(1000)

    component, badges = MultiSigMaker.instantiate(
        ledger, 2, 2, account3, account1.withdraw(ledger.xrd, 1000)
    )
    assert badges.amount == 2
    account1.deposit(badges)
    account2.deposit(account1.withdraw(component.signer_badge, 1))

    component.approve(account1.withdraw(component.signer_badge, 1))
    assert account3.balance(ledger.xrd) == Decimal(1000)
    assert component.badges_approved == 1

    component.approve(account2.withdraw(component.signer_badge, 1))
    assert account3.balance(ledger.xrd) == Decimal(2000)
    assert component.tokens.amount == 0
    assert ledger.resource_manager(component.signer_badge).total_supply == 0


def test_min_required_cannot_exceed_badges():
    ledger = Ledger()
    dest = ledger.new_account(0)
    with pytest.raises(LedgerError, match="Min required sig can't be greater"):
        MultiSigMaker.instantiate(ledger, 1, 2, dest, ledger.new_fungible(5))


def test_wrong_badge_rejected():
    ledger = Ledger()
    dest = ledger.new_account(0)
    component, _ = MultiSigMaker.instantiate(ledger, 2, 1, dest, ledger.new_fungible(5))
    with pytest.raises(LedgerError, match="Invalid badge"):
        component.approve(ledger.new_fungible(1, divisibility=0))


def test_empty_badge_rejected():
    ledger = Ledger()
    dest = ledger.new_account(0)
    component, badges = MultiSigMaker.instantiate(ledger, 2, 1, dest, ledger.new_fungible(5))
    with pytest.raises(LedgerError, match="Invalid auth"):
        component.approve(badges.take(0))