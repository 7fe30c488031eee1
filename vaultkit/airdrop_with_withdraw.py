"""Airdrop where each recipient gets a badge and withdraws its own share."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal

from .ledger import AccessRules, Account, Bucket, Ledger, LedgerError, Proof, Vault, require

logger = logging.getLogger(__name__)


def _fmt(amount: Decimal) -> str:
    return f"{amount.normalize():f}"


@dataclass(frozen=True)
class _ClaimData:
    amount: Decimal
    token_type: str
    is_collected: bool = False


class AirdropWithWithdraw:
    """Holds airdropped tokens until each badge holder withdraws them."""

    def __init__(
        self,
        ledger: Ledger,
        admin_badge: str,
        tokens: Vault,
        recipient_badge_address: str,
        minter_badge_vault: Vault,
        access: AccessRules,
    ) -> None:
        self._ledger = ledger
        self.admin_badge = admin_badge
        self.tokens = tokens
        self.recipient_badge_address = recipient_badge_address
        self.minter_badge_vault = minter_badge_vault
        self._access = access

    @classmethod
    def instantiate(cls, ledger: Ledger, token_type: str) -> tuple["AirdropWithWithdraw", Bucket]:
        admin_badge = ledger.new_fungible(1, divisibility=0)
        minter_badge = ledger.new_fungible(1, divisibility=0, metadata={"name": "minter badge"})
        minter_rule = require(minter_badge.resource_address)
        recipient_badge_address = ledger.new_non_fungible(
            metadata={"name": "recipient badge"},
            mintable=minter_rule,
            updateable=minter_rule,
        )
        access = AccessRules().method("add_recipient", require(admin_badge.resource_address))
        component = cls(
            ledger,
            admin_badge.resource_address,
            Vault(ledger.resource_manager(token_type)),
            recipient_badge_address,
            Vault.with_bucket(minter_badge),
            access,
        )
        return component, admin_badge

    def add_recipient(self, recipient: Account, tokens: Bucket) -> None:
        """Store the tokens and send the recipient a badge entitling it to them."""
        self._access.check("add_recipient", self._ledger.proofs)
        if not tokens.amount > 0:
            raise LedgerError("tokens quantity cannot be 0")
        if tokens.resource_address != self.tokens.resource_address:
            raise LedgerError("token address must match")
        manager = self._ledger.resource_manager(self.recipient_badge_address)
        with self.minter_badge_vault.authorize():
            badge = manager.mint_non_fungible(
                self._ledger.random_id(),
                _ClaimData(tokens.amount, tokens.resource_address),
            )
        self.tokens.put(tokens)
        recipient.deposit(badge)

    def _check_badge(self, auth: Proof) -> None:
        if auth.resource_address != self.recipient_badge_address or auth.amount != 1:
            raise LedgerError("Invalid Badge Provided")

    def available_token(self, auth: Proof) -> Decimal:
        """Amount the badge holder can still withdraw."""
        self._check_badge(auth)
        data: _ClaimData = auth.non_fungible_data
        result = Decimal(0) if data.is_collected else data.amount
        logger.info("available : %s", _fmt(result))
        return result

    def withdraw_token(self, auth: Proof) -> Bucket:
        """Hand the badge holder its tokens, once."""
        self._check_badge(auth)
        data: _ClaimData = auth.non_fungible_data
        if data.is_collected:
            raise LedgerError("withdraw already done")
        manager = self._ledger.resource_manager(self.recipient_badge_address)
        with self.minter_badge_vault.authorize():
            manager.update_non_fungible_data(auth.non_fungible_id, replace(data, is_collected=True))
        logger.info("withdraw_token : %s", _fmt(data.amount))
        return self.tokens.take(data.amount)