"""Business services for books and loans.

Services sit between the HTTP routes and the repositories and hold the
business rules of the system: a book ISBN is registered once, a book is
never lent twice at the same time, and a returned loan stays returned.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, List, Optional

from .errors import (
    BookAlreadyLoanedError,
    BookHasLoansError,
    DuplicateIsbnError,
    InvalidArgumentError,
    LoanAlreadyReturnedError,
)
from .logging_config import get_logger
from .models import Book, Loan
from .pagination import Page, PageRequest
from .repository import BookFilter, BookRepository, LoanFilter, LoanRepository

logger = get_logger(__name__)


class BookService:
    def __init__(self, repository: BookRepository):
        self.repository = repository

    def save(self, book: Book) -> Book:
        """Persist a new book. Raises DuplicateIsbnError if the ISBN is taken."""
        if self.repository.exists_by_isbn(book.isbn):
            raise DuplicateIsbnError()
        saved = self.repository.save(book)
        logger.info(f"Book {saved.id} saved (isbn={saved.isbn})")
        return saved

    def get_by_id(self, book_id: int) -> Optional[Book]:
        return self.repository.get_by_id(book_id)

    def update(self, book: Book) -> Book:
        """Save changes to an existing book.

        Raises DuplicateIsbnError when the new ISBN belongs to another book.
        """
        if book is None or book.id is None:
            raise InvalidArgumentError("Book id cannot be null")
        if self.repository.exists_by_isbn_on_other_book(book.isbn, book.id):
            raise DuplicateIsbnError()
        return self.repository.save(book)

    def delete(self, book: Book) -> None:
        """Remove a book that was never lent. Raises BookHasLoansError otherwise."""
        if book is None or book.id is None:
            raise InvalidArgumentError("Book id cannot be null")
        if self.repository.has_loans(book):
            raise BookHasLoansError()
        self.repository.delete(book)
        logger.info(f"Book {book.id} deleted")

    def find(self, criteria: BookFilter, page: PageRequest) -> Page[Book]:
        return self.repository.find(criteria, page)

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.repository.get_by_isbn(isbn)


def _book_id_of(loan: Loan) -> Optional[int]:
    if loan.book_id is not None:
        return loan.book_id
    if loan.book is not None:
        return loan.book.id
    return None


class LoanService:
    """Loan workflow.

    Args:
        repository: loan data access
        late_after_days: loans older than this many days are late
        today: date provider, replaced in tests
    """

    def __init__(
        self,
        repository: LoanRepository,
        late_after_days: int = 4,
        today: Callable[[], date] = date.today,
    ):
        self.repository = repository
        self.late_after_days = late_after_days
        self._today = today

    def save(self, loan: Loan) -> Loan:
        """Persist a new loan. Raises BookAlreadyLoanedError if the book is out."""
        book_id = _book_id_of(loan)
        if book_id is None:
            raise InvalidArgumentError("Loan book cannot be null")
        if self.repository.exists_by_book_and_not_returned(book_id):
            raise BookAlreadyLoanedError()
        saved = self.repository.save(loan)
        logger.info(f"Loan {saved.id} created for {saved.customer}")
        return saved

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        return self.repository.get_by_id(loan_id)

    def update(self, loan: Loan) -> Loan:
        return self.repository.save(loan)

    def set_returned(self, loan: Loan, returned: bool) -> Loan:
        """Record the returned flag of *loan*.

        Returned is terminal: clearing the flag on a returned loan raises
        LoanAlreadyReturnedError. Setting the same value again is a no-op save.
        """
        if loan.returned and not returned:
            raise LoanAlreadyReturnedError()
        loan.returned = returned
        saved = self.update(loan)
        if returned:
            logger.info(f"Loan {saved.id} returned")
        return saved

    def find(self, loan_filter: LoanFilter, page: PageRequest) -> Page[Loan]:
        """Loans matching the filter ISBN or the filter customer.

        With neither filter set, every loan is returned (paged) rather than
        an empty page.
        """
        return self.repository.find_by_book_isbn_or_customer(
            loan_filter.isbn, loan_filter.customer, page
        )

    def get_loans_by_book(self, book: Book, page: PageRequest) -> Page[Loan]:
        return self.repository.find_by_book(book, page)

    def late_threshold(self) -> date:
        """Loans dated strictly before this day are late."""
        return self._today() - timedelta(days=self.late_after_days)

    def get_all_late_loans(self) -> List[Loan]:
        return self.repository.find_by_loan_date_less_than_and_not_returned(
            self.late_threshold()
        )
