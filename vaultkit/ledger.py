"""In-memory ledger of resources, buckets, vaults, proofs and accounts."""

from __future__ import annotations

import itertools
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Iterable, Iterator

DIVISIBILITY_NONE = 0
DIVISIBILITY_MAXIMUM = 18


class LedgerError(Exception):
    """Raised when an operation on the ledger is not allowed."""


class AuthorizationError(LedgerError):
    """Raised when the proofs in the auth zone do not satisfy a rule."""


def _truncate(value: Decimal, places: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 80
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)


def to_decimal(value: Any) -> Decimal:
    """Convert a number or numeric string to a Decimal truncated to 18 places."""
    if isinstance(value, bool):
        raise LedgerError(f"not a decimal amount: {value!r}")
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, (int, str)):
            result = Decimal(value)
        elif isinstance(value, float):
            result = Decimal(repr(value))
        else:
            raise LedgerError(f"not a decimal amount: {value!r}")
    except InvalidOperation as exc:
        raise LedgerError(f"not a decimal amount: {value!r}") from exc
    if not result.is_finite():
        raise LedgerError(f"not a finite amount: {value!r}")
    return _truncate(result, DIVISIBILITY_MAXIMUM)


class ResourceType(Enum):
    FUNGIBLE = "fungible"
    NON_FUNGIBLE = "non_fungible"


@dataclass(frozen=True)
class Rule:
    """An access rule: every required resource must be proven."""

    required: frozenset = frozenset()

    def is_satisfied(self, proofs: Iterable["Proof"]) -> bool:
        present = {p.resource_address for p in proofs if p.amount > 0}
        return self.required <= present

    def __and__(self, other: "Rule") -> "Rule":
        return Rule(self.required | other.required)


def require(address: str) -> Rule:
    """Rule that needs a proof of the given resource."""
    return Rule(frozenset({address}))


def allow_all() -> Rule:
    """Rule that anyone satisfies."""
    return Rule()


class AccessRules:
    """Per-method access rules with a default."""

    def __init__(self) -> None:
        self._methods: dict[str, Rule] = {}
        self._default = allow_all()

    def method(self, name: str, rule: Rule) -> "AccessRules":
        self._methods[name] = rule
        return self

    def default(self, rule: Rule) -> "AccessRules":
        self._default = rule
        return self

    def check(self, name: str, proofs: Iterable["Proof"]) -> None:
        rule = self._methods.get(name, self._default)
        if not rule.is_satisfied(proofs):
            raise AuthorizationError(f"not authorized to call {name!r}")


class ResourceManager:
    """Definition and supply of one resource."""

    def __init__(
        self,
        ledger: "Ledger",
        address: str,
        resource_type: ResourceType,
        divisibility: int,
        metadata: dict[str, str],
        mintable: Rule | None,
        burnable: Rule | None,
        updateable: Rule | None,
    ) -> None:
        self.ledger = ledger
        self.address = address
        self.resource_type = resource_type
        self.divisibility = divisibility
        self.metadata = metadata
        self.mintable = mintable
        self.burnable = burnable
        self.updateable = updateable
        self.total_supply = Decimal(0)
        self._data: dict[Any, Any] = {}

    @property
    def is_non_fungible(self) -> bool:
        return self.resource_type is ResourceType.NON_FUNGIBLE

    def _authorize(self, rule: Rule | None, action: str) -> None:
        if rule is None:
            raise LedgerError(f"resource {self.address} is not {action}")
        if not rule.is_satisfied(self.ledger.proofs):
            raise AuthorizationError(f"not authorized: resource {self.address} {action}")

    def _check_amount(self, amount: Any) -> Decimal:
        value = to_decimal(amount)
        if value < 0:
            raise LedgerError(f"negative amount: {value}")
        if _truncate(value, self.divisibility) != value:
            raise LedgerError(
                f"amount {value} exceeds divisibility {self.divisibility} of {self.address}"
            )
        return value

    def _issue(self, amount: Any) -> "Bucket":
        value = self._check_amount(amount)
        self.total_supply += value
        return Bucket(self, value)

    def mint(self, amount: Any) -> "Bucket":
        if self.is_non_fungible:
            raise LedgerError("use mint_non_fungible for non-fungible resources")
        self._authorize(self.mintable, "mintable")
        return self._issue(amount)

    def mint_non_fungible(self, nf_id: Any, data: Any) -> "Bucket":
        if not self.is_non_fungible:
            raise LedgerError(f"resource {self.address} is fungible")
        self._authorize(self.mintable, "mintable")
        if nf_id in self._data:
            raise LedgerError(f"non-fungible {nf_id!r} already exists")
        self._data[nf_id] = data
        self.total_supply += 1
        return Bucket(self, non_fungible_ids={nf_id})

    def burn(self, bucket: "Bucket") -> None:
        if bucket.manager is not self:
            raise LedgerError("bucket does not hold this resource")
        self._authorize(self.burnable, "burnable")
        self.total_supply -= bucket.amount
        for nf_id in bucket.non_fungible_ids:
            del self._data[nf_id]
        bucket._drain()

    def non_fungible_data(self, nf_id: Any) -> Any:
        try:
            return self._data[nf_id]
        except KeyError:
            raise LedgerError(f"no non-fungible {nf_id!r} in {self.address}") from None

    def update_non_fungible_data(self, nf_id: Any, data: Any) -> None:
        self._authorize(self.updateable, "updateable")
        if nf_id not in self._data:
            raise LedgerError(f"no non-fungible {nf_id!r} in {self.address}")
        self._data[nf_id] = data


def _first_ids(ids: Iterable[Any], count: int) -> set:
    return set(sorted(ids, key=str)[:count])


class Bucket:
    """A transient container of one resource."""

    def __init__(self, manager: ResourceManager, amount: Any = 0, non_fungible_ids: Iterable[Any] = ()) -> None:
        self.manager = manager
        self._ids = set(non_fungible_ids)
        self._amount = Decimal(0) if manager.is_non_fungible else to_decimal(amount)

    @property
    def resource_address(self) -> str:
        return self.manager.address

    @property
    def amount(self) -> Decimal:
        if self.manager.is_non_fungible:
            return Decimal(len(self._ids))
        return self._amount

    @property
    def non_fungible_ids(self) -> frozenset:
        return frozenset(self._ids)

    def is_empty(self) -> bool:
        return self.amount == 0

    def _drain(self) -> None:
        self._ids.clear()
        self._amount = Decimal(0)

    def take(self, amount: Any) -> "Bucket":
        value = self.manager._check_amount(amount)
        if value > self.amount:
            raise LedgerError("Insufficient balance")
        if self.manager.is_non_fungible:
            taken = _first_ids(self._ids, int(value))
            self._ids -= taken
            return Bucket(self.manager, non_fungible_ids=taken)
        self._amount -= value
        return Bucket(self.manager, value)

    def take_all(self) -> "Bucket":
        return self.take(self.amount)

    def put(self, other: "Bucket") -> None:
        if other.manager is not self.manager:
            raise LedgerError(
                f"cannot put {other.resource_address} into a bucket of {self.resource_address}"
            )
        self._ids |= other._ids
        self._amount += other._amount
        other._drain()

    def create_proof(self) -> "Proof":
        return Proof(self.resource_address, self.amount, frozenset(self._ids), self.manager)

    def burn(self) -> None:
        self.manager.burn(self)

    def __repr__(self) -> str:
        return f"Bucket({self.resource_address}, {self.amount})"


@dataclass(frozen=True)
class Proof:
    """Evidence that some amount of a resource is held."""

    resource_address: str
    amount: Decimal
    non_fungible_ids: frozenset = frozenset()
    manager: ResourceManager | None = field(default=None, compare=False, repr=False)

    @property
    def non_fungible_id(self) -> Any:
        if len(self.non_fungible_ids) != 1:
            raise LedgerError("proof does not hold exactly one non-fungible")
        return next(iter(self.non_fungible_ids))

    @property
    def non_fungible_data(self) -> Any:
        if self.manager is None:
            raise LedgerError("proof has no resource manager")
        return self.manager.non_fungible_data(self.non_fungible_id)


class Vault:
    """Permanent storage of one resource."""

    def __init__(self, manager: ResourceManager) -> None:
        self._bucket = Bucket(manager)

    @classmethod
    def with_bucket(cls, bucket: Bucket) -> "Vault":
        vault = cls(bucket.manager)
        vault.put(bucket)
        return vault

    @property
    def manager(self) -> ResourceManager:
        return self._bucket.manager

    @property
    def resource_address(self) -> str:
        return self._bucket.resource_address

    @property
    def amount(self) -> Decimal:
        return self._bucket.amount

    @property
    def non_fungible_ids(self) -> frozenset:
        return self._bucket.non_fungible_ids

    def put(self, bucket: Bucket) -> None:
        self._bucket.put(bucket)

    def take(self, amount: Any) -> Bucket:
        return self._bucket.take(amount)

    def take_all(self) -> Bucket:
        return self._bucket.take_all()

    def is_empty(self) -> bool:
        return self._bucket.is_empty()

    @contextmanager
    def authorize(self) -> Iterator[Proof]:
        """Place a proof of the whole vault in the auth zone for the block."""
        proof = self.create_proof()
        with self.manager.ledger.auth_zone(proof):
            yield proof

    def create_proof(self, amount: Any = None) -> Proof:
        if amount is None:
            return self._bucket.create_proof()
        value = self.manager._check_amount(amount)
        if value > self.amount:
            raise LedgerError("Insufficient balance")
        ids = _first_ids(self.non_fungible_ids, int(value)) if self.manager.is_non_fungible else set()
        return Proof(self.resource_address, value, frozenset(ids), self.manager)


class Account:
    """A holder of vaults, one per resource."""

    def __init__(self, ledger: "Ledger", address: str) -> None:
        self.ledger = ledger
        self.address = address
        self._vaults: dict[str, Vault] = {}

    def deposit(self, bucket: Bucket) -> None:
        vault = self._vaults.get(bucket.resource_address)
        if vault is None:
            vault = self._vaults[bucket.resource_address] = Vault(bucket.manager)
        vault.put(bucket)

    def balance(self, resource_address: str) -> Decimal:
        vault = self._vaults.get(resource_address)
        return vault.amount if vault else Decimal(0)

    def _vault(self, resource_address: str) -> Vault:
        vault = self._vaults.get(resource_address)
        if vault is None:
            raise LedgerError("Insufficient balance")
        return vault

    def withdraw(self, resource_address: str, amount: Any) -> Bucket:
        return self._vault(resource_address).take(amount)

    def create_proof(self, resource_address: str, amount: Any) -> Proof:
        return self._vault(resource_address).create_proof(amount)

    def __repr__(self) -> str:
        return f"Account({self.address})"


class Ledger:
    """Registry of resources, the auth zone and the current epoch."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._resources: dict[str, ResourceManager] = {}
        self._zones: list[tuple[Proof, ...]] = []
        self.epoch = 0
        self.xrd = self.new_fungible(None, metadata={"symbol": "XRD"})

    def _next_address(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter):04d}"

    def _register(self, resource_type, divisibility, metadata, mintable, burnable, updateable) -> ResourceManager:
        address = self._next_address("resource")
        manager = ResourceManager(
            self, address, resource_type, divisibility, dict(metadata or {}),
            mintable, burnable, updateable,
        )
        self._resources[address] = manager
        return manager

    def new_fungible(
        self,
        initial_supply: Any = None,
        *,
        divisibility: int = DIVISIBILITY_MAXIMUM,
        metadata: dict[str, str] | None = None,
        mintable: Rule | None = None,
        burnable: Rule | None = None,
    ) -> Bucket | str:
        """Create a fungible resource; return its initial supply, or its address if none."""
        if not DIVISIBILITY_NONE <= divisibility <= DIVISIBILITY_MAXIMUM:
            raise LedgerError(f"invalid divisibility: {divisibility}")
        manager = self._register(
            ResourceType.FUNGIBLE, divisibility, metadata, mintable, burnable, None
        )
        if initial_supply is None:
            return manager.address
        return manager._issue(initial_supply)

    def new_non_fungible(
        self,
        *,
        metadata: dict[str, str] | None = None,
        mintable: Rule | None = None,
        burnable: Rule | None = None,
        updateable: Rule | None = None,
    ) -> str:
        manager = self._register(
            ResourceType.NON_FUNGIBLE, DIVISIBILITY_NONE, metadata, mintable, burnable, updateable
        )
        return manager.address

    def resource_manager(self, address: str) -> ResourceManager:
        try:
            return self._resources[address]
        except KeyError:
            raise LedgerError(f"unknown resource {address!r}") from None

    def new_account(self, xrd: Any = 1000) -> Account:
        account = Account(self, self._next_address("account"))
        if to_decimal(xrd) > 0:
            account.deposit(self.resource_manager(self.xrd)._issue(xrd))
        return account

    @property
    def proofs(self) -> tuple[Proof, ...]:
        return tuple(proof for zone in self._zones for proof in zone)

    @contextmanager
    def auth_zone(self, *args: Proof) -> Iterator[tuple[Proof, ...]]:
        """Make the given proofs available to access checks within the block."""
        self._zones.append(args)
        try:
            yield args
        finally:
            self._zones.pop()

    def advance_epoch(self, epochs: int = 1) -> int:
        if epochs < 0:
            raise LedgerError("epochs cannot go backwards")
        self.epoch += epochs
        return self.epoch

    def random_id(self) -> str:
        return uuid.uuid4().hex