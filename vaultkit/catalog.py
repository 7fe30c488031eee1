"""A shop catalog of references whose stock is minted as non-fungible articles."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .ledger import (
    AccessRules,
    Bucket,
    Ledger,
    LedgerError,
    Vault,
    require,
    to_decimal,
)


def _fmt(amount: Decimal) -> str:
    return f"{amount.normalize():f}"


@dataclass
class Reference:
    """A product line with its own article numbering."""

    id: int
    sequence: int
    name: str
    unit_price: Decimal

    def next(self) -> int:
        self.sequence += 1
        return self.sequence


@dataclass(frozen=True)
class Article:
    name: str
    unit_price: Decimal


class Catalog:
    """Registers references, stocks articles and sells them for XRD."""

    def __init__(self, ledger: Ledger, reference_minter: Vault, owner_badge_ref: str, access: AccessRules) -> None:
        self._ledger = ledger
        self.sequence = 0
        self.references: dict[int, Reference] = {}
        self.stock: dict[int, Vault] = {}
        self.cashier = Vault(ledger.resource_manager(ledger.xrd))
        self.reference_minter = reference_minter
        self.owner_badge_ref = owner_badge_ref
        self._access = access

    @classmethod
    def instantiate(cls, ledger: Ledger) -> tuple["Catalog", Bucket]:
        """Create a catalog; return it and the owner badge."""
        owner_badge = ledger.new_fungible(
            1, divisibility=0, metadata={"name": "Owner of catalog"}
        )
        owner_rule = require(owner_badge.resource_address)
        reference_minter = ledger.new_fungible(
            1,
            divisibility=0,
            metadata={"name": "Reference minter"},
            mintable=owner_rule,
            burnable=owner_rule,
        )
        minter_rule = require(reference_minter.resource_address)
        access = (
            AccessRules()
            .method("withdraw", owner_rule)
            .method("become_minter", owner_rule)
            .method("register_reference", minter_rule)
            .method("add_stock_to_reference", minter_rule)
        )
        catalog = cls(ledger, Vault.with_bucket(reference_minter), owner_badge.resource_address, access)
        return catalog, owner_badge

    def become_minter(self) -> Bucket:
        """Mint a reference-minter badge for the owner."""
        self._access.check("become_minter", self._ledger.proofs)
        with self.reference_minter.authorize():
            return self.reference_minter.manager.mint(1)

    def register_reference(self, name: str, unit_price: Any) -> int:
        """Add a product line and return its id."""
        self._access.check("register_reference", self._ledger.proofs)
        unit_price = to_decimal(unit_price)
        minter_rule = require(self.reference_minter.resource_address)
        article_stock = self._ledger.new_non_fungible(
            metadata={"name": f"Reference {name}"},
            mintable=minter_rule,
            burnable=minter_rule,
        )
        self.sequence += 1
        self.references[self.sequence] = Reference(self.sequence, 0, name, unit_price)
        self.stock[self.sequence] = Vault(self._ledger.resource_manager(article_stock))
        return self.sequence

    def _reference(self, reference_id: int) -> Reference:
        try:
            return self.references[reference_id]
        except KeyError:
            raise LedgerError(f"unknown reference {reference_id}") from None

    def add_stock_to_reference(self, reference_id: int, amount: int) -> Decimal:
        """Mint that many articles into stock; return the stock level."""
        self._access.check("add_stock_to_reference", self._ledger.proofs)
        reference = self._reference(reference_id)
        vault = self.stock[reference_id]
        with self.reference_minter.authorize():
            for _ in range(amount):
                article = vault.manager.mint_non_fungible(
                    reference.next(), Article(reference.name, reference.unit_price)
                )
                vault.put(article)
        return vault.amount

    def purchase_article(self, reference_id: int, quantity: int, payment: Bucket) -> tuple[Bucket, Bucket]:
        """Sell articles; return (articles, change)."""
        if payment.resource_address != self._ledger.xrd:
            raise LedgerError("You need to pay in XRD.")
        total_price = self._reference(reference_id).unit_price * quantity
        if payment.amount < total_price:
            raise LedgerError(
                f"Total price for {quantity} of article {reference_id} is {_fmt(total_price)} XRD. "
                f"You only provided {_fmt(payment.amount)} XRD."
            )
        self.cashier.put(payment.take(total_price))
        return self.stock[reference_id].take(quantity), payment

    def withdraw(self) -> Bucket:
        self._access.check("withdraw", self._ledger.proofs)
        return self.cashier.take_all()