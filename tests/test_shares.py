from decimal import Decimal

import pytest

from vaultkit.ledger import Ledger, LedgerError, Vault
from vaultkit.shares import Shareholder, ShareRegistry


@pytest.fixture
def ledger():
    return Ledger()


def _vault(ledger):
    return Vault(ledger.resource_manager(ledger.xrd))


def _xrd(ledger, amount):
    account = ledger.new_account(amount)
    return account.withdraw(ledger.xrd, amount)


def test_add_counts_shares(ledger):
    registry = ShareRegistry()
    registry.add("a", 20, _vault(ledger))
    registry.add("b", Decimal("5"), _vault(ledger))
    assert registry.total_amount_of_shares == Decimal(25)
    assert len(registry) == 2
    assert "a" in registry and "b" in registry
    assert list(registry) == ["a", "b"]


def test_add_duplicate_rejected(ledger):
    registry = ShareRegistry()
    registry.add("a", 1, _vault(ledger))
    with pytest.raises(LedgerError):
        registry.add("a", 1, _vault(ledger))


def test_vault_for_returns_registered_vault(ledger):
    registry = ShareRegistry()
    vault = _vault(ledger)
    registry.add("a", 1, vault)
    assert registry.vault_for("a") is vault


def test_vault_for_unknown(ledger):
    registry = ShareRegistry()
    with pytest.raises(LedgerError):
        registry.vault_for("missing")


def test_single_shareholder_gets_everything(ledger):
    registry = ShareRegistry()
    registry.add("a", 20, _vault(ledger))
    rest = registry.split(_xrd(ledger, 100000), lambda nf_id: 20)
    assert rest.amount == 0
    assert registry.vault_for("a").amount == Decimal(100000)


def test_split_conserves_amount(ledger):
    registry = ShareRegistry()
    shares = {"a": Decimal(3), "b": Decimal(7), "c": Decimal(11)}
    for nf_id, amount in shares.items():
        registry.add(nf_id, amount, _vault(ledger))
    rest = registry.split(_xrd(ledger, 1000), shares.__getitem__)
    total = rest.amount + sum(registry.vault_for(n).amount for n in shares)
    assert total == Decimal(1000)
    assert all(registry.vault_for(n).amount > 0 for n in shares)


def test_split_without_shareholders_returns_bucket(ledger):
    registry = ShareRegistry()
    rest = registry.split(_xrd(ledger, 50), lambda nf_id: 1)
    assert rest.amount == Decimal(50)


def test_split_with_zero_total_rejected(ledger):
    registry = ShareRegistry()
    registry.add("a", 0, _vault(ledger))
    with pytest.raises(LedgerError):
        registry.split(_xrd(ledger, 50), lambda nf_id: 0)


def test_retire_returns_funds_and_moves_vault(ledger):
    registry = ShareRegistry()
    vault = _vault(ledger)
    registry.add("a", 20, vault)
    registry.add("b", 5, _vault(ledger))
    vault.put(_xrd(ledger, 40))
    bucket = registry.retire("a", 20)
    assert bucket.amount == Decimal(40)
    assert "a" not in registry
    assert registry.dead_vaults == (vault,)
    assert vault.is_empty()
    assert registry.total_amount_of_shares == Decimal(5)


def test_retired_holder_gets_nothing_from_later_split(ledger):
    registry = ShareRegistry()
    dead = _vault(ledger)
    registry.add("a", 1, dead)
    registry.add("b", 1, _vault(ledger))
    registry.retire("a", 1)
    rest = registry.split(_xrd(ledger, 10), lambda nf_id: 1)
    assert dead.amount == 0
    assert registry.vault_for("b").amount == Decimal(10)
    assert rest.amount == 0


def test_retire_unknown(ledger):
    registry = ShareRegistry()
    with pytest.raises(LedgerError):
        registry.retire("missing", 1)


def test_shareholder_data_is_frozen():
    holder = Shareholder(Decimal(20))
    assert holder.amount_of_shares == Decimal(20)
    with pytest.raises(AttributeError):
        holder.amount_of_shares = Decimal(1)