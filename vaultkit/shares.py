"""Bookkeeping of shareholders' vaults and proportional splitting of deposits."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Callable, Iterator

from .ledger import Bucket, LedgerError, Vault, to_decimal


@dataclass(frozen=True)
class Shareholder:
    """Data carried by a shareholder badge."""

    amount_of_shares: Decimal


class ShareRegistry:
    """Maps shareholder badge ids to their vaults and tracks the total of shares.

    Vaults of shareholders who give up their shares are never destroyed; they
    are kept as dead vaults and receive no further funds.
    """

    def __init__(self) -> None:
        self._vaults: dict[Any, Vault] = {}
        self._dead_vaults: list[Vault] = []
        self.total_amount_of_shares = Decimal(0)

    def __len__(self) -> int:
        return len(self._vaults)

    def __contains__(self, nf_id: Any) -> bool:
        return nf_id in self._vaults

    def __iter__(self) -> Iterator[Any]:
        return iter(self._vaults)

    @property
    def dead_vaults(self) -> tuple[Vault, ...]:
        return tuple(self._dead_vaults)

    def add(self, nf_id: Any, amount_of_shares: Any, vault: Vault) -> None:
        """Register a shareholder's vault and count its shares."""
        if nf_id in self._vaults:
            raise LedgerError(f"shareholder {nf_id!r} already registered")
        self._vaults[nf_id] = vault
        self.total_amount_of_shares += to_decimal(amount_of_shares)

    def vault_for(self, nf_id: Any) -> Vault:
        try:
            return self._vaults[nf_id]
        except KeyError:
            raise LedgerError(f"no shareholder {nf_id!r}") from None

    def retire(self, nf_id: Any, amount_of_shares: Any) -> Bucket:
        """Empty a shareholder's vault, uncount its shares and retire the vault."""
        vault = self.vault_for(nf_id)
        remaining = vault.take_all()
        self.total_amount_of_shares -= to_decimal(amount_of_shares)
        del self._vaults[nf_id]
        self._dead_vaults.append(vault)
        return remaining

    def split(self, bucket: Bucket, shares_of: Callable[[Any], Any]) -> Bucket:
        """Move each shareholder's portion of the bucket into its vault.

        Each portion is the holder's shares times the amount still in the
        bucket, divided by the total of shares. What is not handed out is
        returned in the bucket.
        """
        if self._vaults and self.total_amount_of_shares == 0:
            raise LedgerError("cannot split among zero shares")
        step = Decimal(1).scaleb(-bucket.manager.divisibility)
        for nf_id, vault in self._vaults.items():
            shares = to_decimal(shares_of(nf_id))
            with localcontext() as ctx:
                ctx.prec = 80
                owed = shares * bucket.amount / self.total_amount_of_shares
                owed = owed.quantize(step, rounding=ROUND_DOWN)
            vault.put(bucket.take(owed))
        return bucket