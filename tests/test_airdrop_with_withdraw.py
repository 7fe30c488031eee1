import logging
from decimal import Decimal

import pytest

from vaultkit.airdrop_with_withdraw import AirdropWithWithdraw
from vaultkit.ledger import AuthorizationError, Ledger, LedgerError


@pytest.fixture
def env():
    ledger = Ledger()
    admin = ledger.new_account(1000000)
    component, admin_badge = AirdropWithWithdraw.instantiate(ledger, ledger.xrd)
    admin_badge_address = admin_badge.resource_address
    admin.deposit(admin_badge)
    return ledger, admin, component, admin_badge_address


def _add(env, recipient, amount):
    ledger, admin, component, badge_address = env
    with ledger.auth_zone(admin.create_proof(badge_address, 1)):
        component.add_recipient(recipient, admin.withdraw(ledger.xrd, amount))


def test_initial_admin_balance(env):
    ledger, admin, _, _ = env
    assert admin.balance(ledger.xrd) == Decimal(1000000)


def test_withdraw_without_added_recipients_fails(env):
    ledger, _, component, _ = env
    not_recipient = ledger.new_account(1000000)
    with pytest.raises(LedgerError, match="Insufficient balance"):
        component.withdraw_token(
            not_recipient.create_proof(component.recipient_badge_address, 1)
        )


def test_withdraw_already_done_fails(env):
    ledger, _, component, _ = env
    recipient = ledger.new_account(1000000)
    _add(env, recipient, 100)
    proof = recipient.create_proof(component.recipient_badge_address, 1)
    recipient.deposit(component.withdraw_token(proof))
    with pytest.raises(LedgerError, match="withdraw already done"):
        component.withdraw_token(recipient.create_proof(component.recipient_badge_address, 1))


def test_withdraw_after_added_recipients_succeeds(env, caplog):
    caplog.set_level(logging.INFO, logger="vaultkit.airdrop_with_withdraw")
    ledger, admin, component, _ = env
    token_by_recipient = Decimal(100)
    recipients = [ledger.new_account(1000000) for _ in range(2)]
    for recipient in recipients:
        _add(env, recipient, token_by_recipient)
    assert admin.balance(ledger.xrd) == Decimal(1000000) - token_by_recipient * 2

    for recipient in recipients:
        caplog.clear()
        proof = recipient.create_proof(component.recipient_badge_address, 1)
        assert component.available_token(proof) == token_by_recipient
        assert "available : 100" in caplog.messages
        caplog.clear()
        bucket = component.withdraw_token(proof)
        assert "withdraw_token : 100" in caplog.messages
        recipient.deposit(bucket)
        assert recipient.balance(ledger.xrd) == Decimal(1000000) + token_by_recipient


def test_available_is_zero_after_withdraw(env):
    ledger, _, component, _ = env
    recipient = ledger.new_account(0)
    _add(env, recipient, 50)
    proof = recipient.create_proof(component.recipient_badge_address, 1)
    component.withdraw_token(proof)
    assert component.available_token(proof) == 0


def test_add_recipient_requires_admin(env):
    ledger, _, component, _ = env
    outsider = ledger.new_account(1000)
    with pytest.raises(AuthorizationError):
        component.add_recipient(outsider, outsider.withdraw(ledger.xrd, 10))


def test_add_recipient_rejects_zero_tokens(env):
    ledger, admin, component, badge_address = env
    with ledger.auth_zone(admin.create_proof(badge_address, 1)):
        with pytest.raises(LedgerError, match="tokens quantity cannot be 0"):
            component.add_recipient(admin, admin.withdraw(ledger.xrd, 0))


def test_add_recipient_rejects_other_token(env):
    ledger, admin, component, badge_address = env
    other = ledger.new_fungible(10)
    with ledger.auth_zone(admin.create_proof(badge_address, 1)):
        with pytest.raises(LedgerError, match="token address must match"):
            component.add_recipient(admin, other)


def test_invalid_badge_rejected(env):
    ledger, admin, component, badge_address = env
    with pytest.raises(LedgerError, match="Invalid Badge Provided"):
        component.available_token(admin.create_proof(badge_address, 1))