"""Split a bucket of tokens evenly among registered recipients."""

from __future__ import annotations

from decimal import localcontext

from .ledger import AccessRules, Account, Bucket, Ledger, LedgerError, require, to_decimal


class Airdrop:
    """Admin-controlled even distribution of tokens."""

    def __init__(self, ledger: Ledger, admin_badge: str, access: AccessRules) -> None:
        self._ledger = ledger
        self.admin_badge = admin_badge
        self._access = access
        self._recipients: list[Account] = []

    @classmethod
    def instantiate(cls, ledger: Ledger) -> tuple["Airdrop", Bucket]:
        admin_badge = ledger.new_fungible(1, divisibility=0)
        rule = require(admin_badge.resource_address)
        access = AccessRules().method("add_recipient", rule).method("perform_airdrop", rule)
        return cls(ledger, admin_badge.resource_address, access), admin_badge

    @property
    def recipients(self) -> tuple[Account, ...]:
        return tuple(self._recipients)

    def add_recipient(self, recipient: Account) -> None:
        self._access.check("add_recipient", self._ledger.proofs)
        self._recipients.append(recipient)

    def perform_airdrop(self, tokens: Bucket) -> Bucket:
        """Deposit an equal share to each recipient and return what is left."""
        self._access.check("perform_airdrop", self._ledger.proofs)
        if not self._recipients:
            raise LedgerError(
                "You must register at least one recipient before performing an airdrop"
            )
        with localcontext() as ctx:
            ctx.prec = 80
            share = tokens.amount / len(self._recipients)
        share = to_decimal(share)
        for recipient in self._recipients:
            recipient.deposit(tokens.take(share))
        return tokens