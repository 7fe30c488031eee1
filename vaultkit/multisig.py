"""Send tokens to a destination once enough signers approve."""

from __future__ import annotations

from .ledger import Account, Bucket, Ledger, LedgerError, Vault, require


class MultiSigMaker:
    """Holds tokens until the required number of signer badges are burned in approval."""

    def __init__(
        self,
        tokens: Vault,
        min_required_sig: int,
        badge_minter_badge: Vault,
        signer_badge: str,
        destination: Account,
    ) -> None:
        self.tokens = tokens
        self.min_required_sig = min_required_sig
        self.badge_minter_badge = badge_minter_badge
        self.signer_badge = signer_badge
        self.badges_approved = 0
        self.destination = destination

    @classmethod
    def instantiate(
        cls,
        ledger: Ledger,
        nb_badges: int,
        min_required_sig: int,
        destination: Account,
        amount: Bucket,
    ) -> tuple["MultiSigMaker", Bucket]:
        if min_required_sig > nb_badges:
            raise LedgerError("Min required sig can't be greater than amount of badges")
        minter = ledger.new_fungible(1, divisibility=0)
        minter_rule = require(minter.resource_address)
        signer_address = ledger.new_fungible(
            None,
            divisibility=0,
            metadata={"name": "MultiSig Signer Badge"},
            mintable=minter_rule,
            burnable=minter_rule,
        )
        with ledger.auth_zone(minter.create_proof()):
            badges = ledger.resource_manager(signer_address).mint(nb_badges)
        component = cls(
            Vault.with_bucket(amount),
            min_required_sig,
            Vault.with_bucket(minter),
            signer_address,
            destination,
        )
        return component, badges

    def approve(self, auth_badge: Bucket) -> None:
        """Burn the signer badge and send the tokens once enough have approved."""
        if not auth_badge.amount > 0:
            raise LedgerError("Invalid auth")
        if auth_badge.resource_address != self.signer_badge:
            raise LedgerError("Invalid badge")
        if self.badges_approved >= self.min_required_sig:
            raise LedgerError("Transaction already approved by majority")
        with self.badge_minter_badge.authorize():
            auth_badge.burn()
        self.badges_approved += 1
        if self.badges_approved >= self.min_required_sig:
            self.destination.deposit(self.tokens.take_all())