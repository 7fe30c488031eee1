"""A lending library with paid memberships, loan periods and late fees."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .ledger import AccessRules, Bucket, Ledger, LedgerError, Proof, Vault, require, to_decimal

logger = logging.getLogger(__name__)

_INITIAL_BOOKS = {
    "9781611297560": ("Leviathan Wakes", "James S. A. Corey"),
    "9780450011849": ("Dune", "Frank Herbert"),
    "9781844162949": ("Horus Rising", "Dan Abnett"),
}


def _fmt(amount: Decimal) -> str:
    return f"{amount.normalize():f}"


@dataclass(frozen=True)
class Book:
    title: str
    author: str


@dataclass(frozen=True)
class BorrowedBook:
    """Record of a loan: the epoch it started and the borrower's badge."""

    epoch: int
    user_id: str


class Library:
    """Sells memberships and lends books for a fixed number of epochs."""

    def __init__(
        self,
        ledger: Ledger,
        librarian_badge_def: str,
        member_badges: Vault,
        membership_price: Decimal,
        borrow_epochs: int,
        access: AccessRules,
    ) -> None:
        self._ledger = ledger
        self.librarian_badge_def = librarian_badge_def
        self.fees = Vault(ledger.resource_manager(ledger.xrd))
        self.books: dict[str, Book] = {
            isbn: Book(title, author) for isbn, (title, author) in _INITIAL_BOOKS.items()
        }
        self.member_badges = member_badges
        self.member_badge_def = member_badges.resource_address
        self.membership_price = membership_price
        self.borrowed_books: dict[str, BorrowedBook] = {}
        self.borrow_epochs = borrow_epochs
        self._access = access

    @classmethod
    def instantiate(
        cls,
        ledger: Ledger,
        member_badge_count: int,
        membership_price: Any,
        borrow_epochs: int,
    ) -> tuple["Library", Bucket]:
        """Create a library; return it and the librarian badge."""
        librarian_badge = ledger.new_fungible(
            1, divisibility=0, metadata={"name": "Librarian Badge", "symbol": "LB"}
        )
        member_badges = ledger.new_fungible(
            member_badge_count,
            divisibility=0,
            metadata={"name": "Library Membership Badge", "symbol": "LMB"},
        )
        access = AccessRules().method("withdraw_fees", require(librarian_badge.resource_address))
        library = cls(
            ledger,
            librarian_badge.resource_address,
            Vault.with_bucket(member_badges),
            to_decimal(membership_price),
            borrow_epochs,
            access,
        )
        return library, librarian_badge

    def print_library(self) -> list[str]:
        """Log the state of the library and return the logged lines."""
        lines = [
            f"Current epoch, {self._ledger.epoch}",
            f"Membership price: {_fmt(self.membership_price)}, "
            f"memberships available: {_fmt(self.member_badges.amount)}",
            "All books:",
        ]
        lines.extend(f"{isbn}: {book.title}, {book.author}" for isbn, book in self.books.items())
        lines.append("Borrowed books:")
        lines.extend(
            f"{isbn}: {loan.user_id}, {loan.epoch}" for isbn, loan in self.borrowed_books.items()
        )
        for line in lines:
            logger.info("%s", line)
        return lines

    def register(self, payment: Bucket) -> Bucket:
        """Take the membership price and return a membership badge."""
        logger.info(
            "Attempting to register user, membership badges remaining %s, payment amount %s",
            _fmt(self.member_badges.amount),
            _fmt(payment.amount),
        )
        if self.member_badges.is_empty():
            raise LedgerError("No memberships available")
        if payment.amount != self.membership_price:
            raise LedgerError("Wrong amount sent")
        if payment.resource_address != self._ledger.xrd:
            raise LedgerError("Can only pay with XRD")
        self.fees.put(payment)
        logger.info("Successfully registered user")
        return self.member_badges.take(1)

    def _check_member(self, auth: Proof) -> None:
        if auth.resource_address != self.member_badge_def:
            raise LedgerError("Not a library membership badge")

    @staticmethod
    def _user_id(badge: Proof) -> str:
        if not badge.amount > 0:
            raise LedgerError("Invalid badge provided")
        return badge.resource_address

    def _log_book(self, isbn: str) -> None:
        book = self.books[isbn]
        logger.info("Book found (ISBN: %s, Title: %s, Author: %s)", isbn, book.title, book.author)

    def _borrowed_book(self, isbn: str, badge: Proof) -> BorrowedBook:
        loan = self.borrowed_books.get(isbn)
        if loan is None:
            raise LedgerError("Book not borrowed")
        if loan.user_id != self._user_id(badge):
            raise LedgerError("Book not borrowed by this user")
        self._log_book(isbn)
        return loan

    def _is_overdue(self, loan: BorrowedBook) -> bool:
        overdue = self._ledger.epoch > loan.epoch + self.borrow_epochs
        logger.info(
            "Book borrowed on epoch %s, current epoch %s, overdue = %s",
            loan.epoch,
            self._ledger.epoch,
            str(overdue).lower(),
        )
        return overdue

    def borrow_book(self, isbn: str, auth: Proof) -> None:
        logger.info("Attempting to borrow book with ISBN %s", isbn)
        self._check_member(auth)
        if isbn not in self.books:
            raise LedgerError("Book not in library")
        if isbn in self.borrowed_books:
            raise LedgerError("Book already borrowed")
        self._log_book(isbn)
        self.borrowed_books[isbn] = BorrowedBook(self._ledger.epoch, self._user_id(auth))
        logger.info("Book borrowed")

    def return_book(self, isbn: str, auth: Proof) -> None:
        logger.info("Attempting to return book with ISBN %s", isbn)
        self._check_member(auth)
        loan = self._borrowed_book(isbn, auth)
        if self._is_overdue(loan):
            raise LedgerError("Book is overdue")
        del self.borrowed_books[isbn]
        logger.info("Book returned")

    def pay_fee(self, isbn: str, payment: Bucket, auth: Proof) -> None:
        """Pay the late fee of one XRD and return an overdue book."""
        logger.info("Attempting to pay fee with payment amount: %s", _fmt(payment.amount))
        self._check_member(auth)
        loan = self._borrowed_book(isbn, auth)
        if not self._is_overdue(loan):
            raise LedgerError("Book is not overdue")
        if payment.amount != 1:
            raise LedgerError("Wrong amount sent")
        if payment.resource_address != self._ledger.xrd:
            raise LedgerError("Can only pay with XRD")
        self.fees.put(payment)
        del self.borrowed_books[isbn]
        logger.info("Late fee paid and book returned")

    def withdraw_fees(self) -> Bucket:
        self._access.check("withdraw_fees", self._ledger.proofs)
        logger.info("Withdrawing all late fees: %s", _fmt(self.fees.amount))
        return self.fees.take_all()