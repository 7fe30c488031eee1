"""Sealed-time auction with bid bonds and a payment deadline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from .ledger import AccessRules, Bucket, Ledger, LedgerError, Proof, Vault, require, to_decimal

PAYMENT_DEADLINE = 100


@dataclass(frozen=True)
class _Bidder:
    bid: Decimal = Decimal(0)
    bid_bond_reclaimed: bool = False


class Auction:
    """Sells an offering to the highest bidder, who pays within a deadline."""

    def __init__(
        self,
        ledger: Ledger,
        offering: Vault,
        duration: int,
        payment_resource: str,
        reserve_price: Decimal,
        bid_bond: Decimal,
        auctioneer_badge: str,
        access: AccessRules,
    ) -> None:
        self._ledger = ledger
        self.offering = offering
        manager = ledger.resource_manager(payment_resource)
        self.bid_bonds = Vault(manager)
        self.payment = Vault(manager)
        self.start = ledger.epoch
        self.duration = duration
        self.payment_resource = payment_resource
        self.reserve_price = reserve_price
        self.bid_bond = bid_bond
        self._bidders: dict[str, _Bidder] = {}
        self.highest_bid = Decimal(0)
        self.auctioneer_badge = auctioneer_badge
        self.payment_claimed = False
        self._access = access

    @classmethod
    def instantiate(
        cls,
        ledger: Ledger,
        offering: Bucket,
        duration: int,
        payment_resource: str,
        reserve_price: Any,
        bid_bond: Any,
    ) -> tuple["Auction", Bucket]:
        reserve_price = to_decimal(reserve_price)
        bid_bond = to_decimal(bid_bond)
        if not offering.amount > 0:
            raise LedgerError("Incorrect offering")
        if bid_bond > reserve_price:
            raise LedgerError("Bid bond higher than the reserve price")
        badge = ledger.new_fungible(1, divisibility=0, metadata={"name": "Acutioneer badge"})
        access = AccessRules().method("claim_payment", require(badge.resource_address))
        auction = cls(
            ledger,
            Vault.with_bucket(offering),
            duration,
            payment_resource,
            reserve_price,
            bid_bond,
            badge.resource_address,
            access,
        )
        return auction, badge

    @property
    def _end(self) -> int:
        return self.start + self.duration

    @property
    def _epoch(self) -> int:
        return self._ledger.epoch

    def _get_bidder(self, bidder_badge: Proof) -> _Bidder:
        if not bidder_badge.amount > 0:
            raise LedgerError("No bidder badge presented")
        bidder = self._bidders.get(bidder_badge.resource_address)
        if bidder is None:
            raise LedgerError("Incorrect bidder badge")
        return bidder

    def register(self, bid_bond: Bucket) -> Bucket:
        """Take the bid bond and return a new bidder badge."""
        if self._epoch > self._end:
            raise LedgerError("Auction closed")
        if bid_bond.resource_address != self.payment_resource:
            raise LedgerError("Incorrect payment token")
        if bid_bond.amount != self.bid_bond:
            raise LedgerError("Incorrect bid bond")
        self.bid_bonds.put(bid_bond)
        badge = self._ledger.new_fungible(1, divisibility=0, metadata={"name": "Bidder badge"})
        self._bidders[badge.resource_address] = _Bidder()
        return badge

    def bid(self, bid: Any, bidder_badge: Proof) -> None:
        if self._epoch > self._end:
            raise LedgerError("Auction closed")
        bid = to_decimal(bid)
        bidder = self._get_bidder(bidder_badge)
        if bid < self.reserve_price:
            raise LedgerError("Bid lower than the reserve price")
        if not bid > self.highest_bid:
            raise LedgerError("Bid not higer than the current highest bid")
        self._bidders[bidder_badge.resource_address] = replace(bidder, bid=bid)
        self.highest_bid = bid

    def claim_offering(self, payment: Bucket, bidder_badge: Proof) -> Bucket:
        """Winning bidder pays the bid less the bond and receives the offering."""
        if not self._epoch > self._end:
            raise LedgerError("Auction open")
        if self._epoch > self._end + PAYMENT_DEADLINE:
            raise LedgerError("Payment deadline passed")
        bidder = self._get_bidder(bidder_badge)
        if not (bidder.bid > 0 and bidder.bid == self.highest_bid):
            raise LedgerError("Not the winning bidder")
        if self.offering.is_empty():
            raise LedgerError("Offering already claimed")
        if payment.resource_address != self.payment_resource:
            raise LedgerError("Incorrect payment token")
        if payment.amount != self.highest_bid - self.bid_bond:
            raise LedgerError("Incorrect payment amount")
        self.payment.put(payment)
        return self.offering.take_all()

    def reclaim_bid_bond(self, bidder_badge: Proof) -> Bucket:
        """Losing bidders get their bond back after the auction closes."""
        if not self._epoch > self._end:
            raise LedgerError("Acution open")
        bidder = self._get_bidder(bidder_badge)
        if not (bidder.bid == 0 or bidder.bid != self.highest_bid):
            raise LedgerError("Winning bidder cannot reclaim the bid bond")
        if bidder.bid_bond_reclaimed:
            raise LedgerError("Bid bond already reclaimed")
        self._bidders[bidder_badge.resource_address] = replace(bidder, bid_bond_reclaimed=True)
        return self.bid_bonds.take(self.bid_bond)

    def claim_payment(self) -> tuple[Bucket, Bucket]:
        """Auctioneer takes the payment and any unsold offering."""
        self._access.check("claim_payment", self._ledger.proofs)
        if not self._epoch > self._end:
            raise LedgerError("Auction open")
        if self.payment_claimed:
            raise LedgerError("Payment already claimed")
        if not (
            self.highest_bid == 0
            or not self.payment.is_empty()
            or self._epoch > self._end + PAYMENT_DEADLINE
        ):
            raise LedgerError("Payment not received and the payment deadline not passed")
        if self.highest_bid > 0:
            self.payment.put(self.bid_bonds.take(self.bid_bond))
        self.payment_claimed = True
        return self.payment.take_all(), self.offering.take_all()