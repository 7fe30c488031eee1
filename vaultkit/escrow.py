"""Two-party token swap held in escrow until both accept or one cancels."""

from __future__ import annotations

from .ledger import Bucket, Ledger, LedgerError, Proof, Vault


class Escrow:
    """Holds each party's tokens and releases them on acceptance or cancellation."""

    def __init__(self, token_a: Vault, token_b: Vault, account_a_badge: str, account_b_badge: str) -> None:
        self.token_a = token_a
        self.token_b = token_b
        self.account_a_badge = account_a_badge
        self.account_b_badge = account_b_badge
        self.account_a_accepted = False
        self.account_b_accepted = False
        self.trade_canceled = False

    @classmethod
    def instantiate(cls, ledger: Ledger, token_a_address: str, token_b_address: str) -> tuple["Escrow", Bucket, Bucket]:
        badge_a = ledger.new_fungible(1, divisibility=0, metadata={"symbol": "BADGE A"})
        badge_b = ledger.new_fungible(1, divisibility=0, metadata={"symbol": "BADGE B"})
        escrow = cls(
            Vault(ledger.resource_manager(token_a_address)),
            Vault(ledger.resource_manager(token_b_address)),
            badge_a.resource_address,
            badge_b.resource_address,
        )
        return escrow, badge_a, badge_b

    def _user_id(self, badge: Proof) -> str:
        if not badge.amount > 0:
            raise LedgerError("Invalid user proof")
        user_id = badge.resource_address
        if user_id not in (self.account_a_badge, self.account_b_badge):
            raise LedgerError("Invalid user proof")
        return user_id

    def put_tokens(self, tokens: Bucket, auth: Proof) -> None:
        user_id = self._user_id(auth)
        if self.account_a_accepted or self.account_b_accepted:
            raise LedgerError("Can't add more tokens when someone accepted")
        if self.trade_canceled:
            raise LedgerError("The trade was canceled")
        vault = self.token_a if user_id == self.account_a_badge else self.token_b
        vault.put(tokens)

    def withdraw(self, auth: Proof) -> Bucket:
        user_id = self._user_id(auth)
        if not (self.trade_canceled or (self.account_a_accepted and self.account_b_accepted)):
            raise LedgerError("The trade must be accepted or canceled")
        own, other = (
            (self.token_a, self.token_b)
            if user_id == self.account_a_badge
            else (self.token_b, self.token_a)
        )
        return own.take_all() if self.trade_canceled else other.take_all()

    def accept(self, auth: Proof) -> None:
        user_id = self._user_id(auth)
        if not (self.token_a.amount > 0 and self.token_b.amount > 0):
            raise LedgerError("Both parties must add their tokens before you can accept")
        if self.trade_canceled:
            raise LedgerError("The trade was canceled")
        if user_id == self.account_a_badge:
            if self.account_a_accepted:
                raise LedgerError("You already accepted the offer !")
            self.account_a_accepted = True
        else:
            if self.account_b_accepted:
                raise LedgerError("You already accepted the offer !")
            self.account_b_accepted = True

    def cancel(self, auth: Proof) -> None:
        if self.account_a_accepted and self.account_b_accepted:
            raise LedgerError("The trade is already over, everyone accepted")
        if self.trade_canceled:
            raise LedgerError("The trade is already canceled")
        if auth.resource_address not in (self.account_a_badge, self.account_b_badge):
            raise LedgerError("Invalid user proof")
        self.trade_canceled = True