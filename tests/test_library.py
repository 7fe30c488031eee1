import pytest

from vaultkit.ledger import AuthorizationError, Ledger, LedgerError
from vaultkit.library import Book, BorrowedBook, Library

DUNE = "9780450011849"


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def setup(ledger):
    library, librarian = Library.instantiate(ledger, 10, "1", 3)
    account = ledger.new_account()
    return library, librarian, account


def _member(ledger, library, account):
    return library.register(account.withdraw(ledger.xrd, 1))


def test_new(setup):
    library, librarian, _ = setup
    assert librarian.amount == 1
    assert library.member_badges.amount == 10
    assert library.books[DUNE] == Book("Dune", "Frank Herbert")
    assert len(library.books) == 3


def test_print_library(setup):
    library, _, _ = setup
    lines = library.print_library()
    assert len(lines) == 7
    assert lines[0] == "Current epoch, 0"
    assert lines[1] == "Membership price: 1, memberships available: 10"


def test_register(ledger, setup):
    library, _, account = setup
    badge = _member(ledger, library, account)
    assert badge.amount == 1
    assert badge.resource_address == library.member_badge_def
    assert library.print_library()[1] == "Membership price: 1, memberships available: 9"
    assert library.fees.amount == 1


def test_register_wrong_amount(ledger, setup):
    library, _, account = setup
    with pytest.raises(LedgerError, match="Wrong amount sent"):
        library.register(account.withdraw(ledger.xrd, 2))


def test_register_wrong_token(ledger, setup):
    library, _, _ = setup
    other = ledger.new_fungible(1)
    with pytest.raises(LedgerError, match="Can only pay with XRD"):
        library.register(other)


def test_register_no_memberships(ledger):
    library, _ = Library.instantiate(ledger, 1, 1, 3)
    account = ledger.new_account()
    _member(ledger, library, account)
    with pytest.raises(LedgerError, match="No memberships available"):
        _member(ledger, library, account)


def test_borrow_and_return(ledger, setup):
    library, _, account = setup
    proof = _member(ledger, library, account).create_proof()
    library.borrow_book(DUNE, proof)
    assert library.borrowed_books[DUNE] == BorrowedBook(0, library.member_badge_def)
    assert len(library.print_library()) == 8
    with pytest.raises(LedgerError, match="Book already borrowed"):
        library.borrow_book(DUNE, proof)
    library.return_book(DUNE, proof)
    assert DUNE not in library.borrowed_books


def test_borrow_unknown_book(ledger, setup):
    library, _, account = setup
    proof = _member(ledger, library, account).create_proof()
    with pytest.raises(LedgerError, match="Book not in library"):
        library.borrow_book("0000000000000", proof)


def test_borrow_with_wrong_badge(ledger, setup):
    library, librarian, _ = setup
    with pytest.raises(LedgerError):
        library.borrow_book(DUNE, librarian.create_proof())
    assert library.borrowed_books == {}


def test_return_not_borrowed(ledger, setup):
    library, _, account = setup
    proof = _member(ledger, library, account).create_proof()
    with pytest.raises(LedgerError, match="Book not borrowed"):
        library.return_book(DUNE, proof)


def test_overdue_and_fee(ledger, setup):
    library, _, account = setup
    proof = _member(ledger, library, account).create_proof()
    library.borrow_book(DUNE, proof)
    with pytest.raises(LedgerError, match="Book is not overdue"):
        library.pay_fee(DUNE, account.withdraw(ledger.xrd, 1), proof)
    ledger.advance_epoch(3)
    library.return_book(DUNE, proof)
    library.borrow_book(DUNE, proof)
    ledger.advance_epoch(4)
    with pytest.raises(LedgerError, match="Book is overdue"):
        library.return_book(DUNE, proof)
    with pytest.raises(LedgerError, match="Wrong amount sent"):
        library.pay_fee(DUNE, account.withdraw(ledger.xrd, 2), proof)
    before = library.fees.amount
    library.pay_fee(DUNE, account.withdraw(ledger.xrd, 1), proof)
    assert library.fees.amount == before + 1
    assert DUNE not in library.borrowed_books


def test_withdraw_fees(ledger, setup):
    library, librarian, account = setup
    _member(ledger, library, account)
    with pytest.raises(AuthorizationError):
        library.withdraw_fees()
    with ledger.auth_zone(librarian.create_proof()):
        fees = library.withdraw_fees()
    assert fees.amount == 1
    assert library.fees.is_empty()