# vaultkit

vaultkit is an in-memory asset ledger. Fungible and non-fungible resources live in buckets and
vaults. Badges prove who a caller is, and access rules guard the methods of a component. The
package also contains a set of financial components built on that ledger.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The ledger

`vaultkit.ledger` holds the core types:

- `Ledger` creates resources (`new_fungible`, `new_non_fungible`) and accounts (`new_account`,
  which starts with 1000 XRD unless told otherwise). It counts epochs (`advance_epoch`), makes
  random non-fungible ids (`random_id`), and presents proofs to components (`auth_zone`). The
  address of its built-in XRD resource is `ledger.xrd`.
- `ResourceManager` mints, burns and updates non-fungible data for one resource. Use
  `ledger.resource_manager(address)` to get one.
- `Bucket` holds resources while they move. `Vault` stores them inside a component. `Proof` shows
  that a caller holds a resource.
- `Account` keeps one vault per resource and offers `deposit`, `withdraw`, `balance` and
  `create_proof`.
- `Rule`, `require`, `allow_all` and `AccessRules` describe who may call which method. Rules
  combine with `&`.
- Failures raise `LedgerError`. A failed access rule raises `AuthorizationError`, a subclass of
  `LedgerError`.

Amounts are `decimal.Decimal` values truncated to 18 decimal places. `to_decimal` converts ints,
floats, strings and decimals.

```python
from vaultkit.ledger import Ledger

ledger = Ledger()
alice = ledger.new_account(1000)
supply = ledger.new_fungible(500, metadata={"symbol": "TKN"})
tkn_address = supply.resource_address
alice.deposit(supply)
assert alice.balance(tkn_address) == 500
```

If `new_fungible` is given `None` as its initial supply, it returns the new resource's address
instead of a bucket.

## Access checks

Methods guarded by access rules check the proofs presented through `ledger.auth_zone(...)`. A call
without the right badges raises `AuthorizationError`.

```python
from vaultkit.ledger import Ledger
from vaultkit.airdrop import Airdrop

ledger = Ledger()
airdrop, admin_badge = Airdrop.instantiate(ledger)
alice = ledger.new_account()
bob = ledger.new_account()

with ledger.auth_zone(admin_badge.create_proof()):
    airdrop.add_recipient(bob)
    leftover = airdrop.perform_airdrop(alice.withdraw(ledger.xrd, 300))
```

## Components

Each component is created with the class method `instantiate`, which takes the ledger first. Most
return the component together with the badges it minted.

| Module | Component | Purpose |
| --- | --- | --- |
| `vaultkit.bank` | `Bank` | Moves funds between a cash vault and a bank account vault; withdrawals need the owner badge. |
| `vaultkit.airdrop` | `Airdrop` | Splits a bucket evenly among registered recipients. |
| `vaultkit.airdrop_with_withdraw` | `AirdropWithWithdraw` | Gives each recipient a non-fungible badge they redeem once for their allotment. |
| `vaultkit.escrow` | `Escrow` | Two-party token swap with accept and cancel steps. |
| `vaultkit.auction` | `Auction` | Auction with bid bonds, a closing epoch and a payment deadline of 100 epochs. |
| `vaultkit.multisig` | `MultiSigMaker` | Sends funds to a destination account once enough signer badges are burned in approval. |
| `vaultkit.library` | `Library` | Memberships, borrowing, returns and late fees for books. |
| `vaultkit.catalog` | `Catalog` | A small shop: references, stock minted as non-fungible articles, purchases for XRD. |

`vaultkit.shares` holds `ShareRegistry` and `Shareholder`. `ShareRegistry` maps shareholder
badge ids to vaults, keeps the total number of shares, retires the vaults of holders who leave,
and splits a deposit among holders in proportion to their shares (`split`).

`Bank`, `Library` and `AirdropWithWithdraw` report their state through the standard `logging`
module. `Bank.balances` and `Library.print_library` also return what they log.

### Example: escrow

```python
from vaultkit.ledger import Ledger
from vaultkit.escrow import Escrow

ledger = Ledger()
a = ledger.new_fungible(8000)
b = ledger.new_fungible(8000)
escrow, badge_a, badge_b = Escrow.instantiate(ledger, a.resource_address, b.resource_address)

escrow.put_tokens(a.take(500), badge_a.create_proof())
escrow.put_tokens(b.take(500), badge_b.create_proof())
escrow.accept(badge_a.create_proof())
escrow.accept(badge_b.create_proof())
received_by_a = escrow.withdraw(badge_a.create_proof())   # 500 of resource b
```

### Example: auction

```python
from vaultkit.ledger import Ledger
from vaultkit.auction import Auction

ledger = Ledger()
seller = ledger.new_fungible(1, divisibility=0)
auction, auctioneer_badge = Auction.instantiate(ledger, seller, 10, ledger.xrd, 50, 5)

bidder = ledger.new_account()
bidder_badge = auction.register(bidder.withdraw(ledger.xrd, 5))
auction.bid(60, bidder_badge.create_proof())

ledger.advance_epoch(11)
item = auction.claim_offering(bidder.withdraw(ledger.xrd, 55), bidder_badge.create_proof())
```

## What the package does not do

- Everything lives in memory. Nothing is written to disk, and a ledger is gone when the process
  ends.
- There is no command-line tool and no server; components are used from Python code.
- There is no ready-made payment-splitter component. `ShareRegistry` provides the bookkeeping such
  a component would need, but minting shareholder badges and guarding its methods is left to the
  caller.