"""Data Access Layer for libraryapi.

Encapsulates database operations on books and loans using SQLModel/SQLAlchemy.
Write methods commit immediately; each HTTP request performs at most one write.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import Session, select, col, func

from .models import Book, Loan
from .pagination import Page, PageRequest


@dataclasses.dataclass
class BookFilter:
    """Partial book criteria. Empty fields match everything."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None


@dataclasses.dataclass
class LoanFilter:
    """Loan search criteria, combined with OR."""

    isbn: Optional[str] = None
    customer: Optional[str] = None


def _outstanding():
    """SQL condition for a loan whose returned flag is not true."""
    return or_(col(Loan.returned).is_(None), col(Loan.returned) == False)  # noqa: E712


class BookRepository:
    def __init__(self, session: Session):
        self.session = session

    def save(self, book: Book) -> Book:
        """Insert or update a book and return the refreshed row."""
        self.session.add(book)
        self.session.commit()
        self.session.refresh(book)
        return book

    def delete(self, book: Book) -> None:
        self.session.delete(book)
        self.session.commit()

    def get_by_id(self, book_id: int) -> Optional[Book]:
        return self.session.get(Book, book_id)

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.session.exec(select(Book).where(Book.isbn == isbn)).first()

    def exists_by_isbn(self, isbn: str) -> bool:
        statement = select(func.count()).select_from(Book).where(Book.isbn == isbn)
        return self.session.exec(statement).one() > 0

    def exists_by_isbn_on_other_book(self, isbn: str, book_id: int) -> bool:
        """True when a book other than *book_id* already carries *isbn*."""
        statement = (
            select(func.count())
            .select_from(Book)
            .where(Book.isbn == isbn, Book.id != book_id)
        )
        return self.session.exec(statement).one() > 0

    def has_loans(self, book: Book) -> bool:
        statement = select(func.count()).select_from(Loan).where(Loan.book_id == book.id)
        return self.session.exec(statement).one() > 0

    def find(self, criteria: BookFilter, page: PageRequest) -> Page[Book]:
        """Case-insensitive 'contains' match on each non-empty criteria field."""
        conditions = []
        for field_name in ("title", "author", "isbn"):
            value = getattr(criteria, field_name)
            if value:
                conditions.append(col(getattr(Book, field_name)).ilike(f"%{value}%"))

        count_stmt = select(func.count()).select_from(Book).where(*conditions)
        total = self.session.exec(count_stmt).one()

        statement = (
            select(Book)
            .where(*conditions)
            .order_by(Book.id)
            .offset(page.offset)
            .limit(page.size)
        )
        books = self.session.exec(statement).all()
        return Page(content=list(books), total_elements=total, request=page)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(Book)).one()


class LoanRepository:
    def __init__(self, session: Session):
        self.session = session

    def save(self, loan: Loan) -> Loan:
        """Insert or update a loan and return the refreshed row."""
        self.session.add(loan)
        self.session.commit()
        self.session.refresh(loan)
        return loan

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        return self.session.get(Loan, loan_id)

    def exists_by_book_and_not_returned(self, book_id: int) -> bool:
        """True when book *book_id* has a loan whose returned flag is not true."""
        statement = (
            select(func.count())
            .select_from(Loan)
            .where(Loan.book_id == book_id, _outstanding())
        )
        return self.session.exec(statement).one() > 0

    def find_by_book_isbn_or_customer(
        self, isbn: Optional[str], customer: Optional[str], page: PageRequest
    ) -> Page[Loan]:
        """Loans whose book ISBN equals *isbn* OR whose customer equals *customer*.

        A None/empty argument contributes no condition; with both empty
        every loan is returned.
        """
        conditions = []
        if isbn:
            conditions.append(Book.isbn == isbn)
        if customer:
            conditions.append(Loan.customer == customer)
        where = [or_(*conditions)] if conditions else []

        count_stmt = (
            select(func.count())
            .select_from(Loan)
            .join(Book, Loan.book_id == Book.id)
            .where(*where)
        )
        total = self.session.exec(count_stmt).one()

        statement = (
            select(Loan)
            .join(Book, Loan.book_id == Book.id)
            .where(*where)
            .order_by(Loan.id)
            .offset(page.offset)
            .limit(page.size)
        )
        loans = self.session.exec(statement).all()
        return Page(content=list(loans), total_elements=total, request=page)

    def find_by_book(self, book: Book, page: PageRequest) -> Page[Loan]:
        count_stmt = select(func.count()).select_from(Loan).where(Loan.book_id == book.id)
        total = self.session.exec(count_stmt).one()

        statement = (
            select(Loan)
            .where(Loan.book_id == book.id)
            .order_by(Loan.id)
            .offset(page.offset)
            .limit(page.size)
        )
        loans = self.session.exec(statement).all()
        return Page(content=list(loans), total_elements=total, request=page)

    def find_by_loan_date_less_than_and_not_returned(self, threshold: date) -> List[Loan]:
        """Outstanding loans dated strictly before *threshold*."""
        statement = (
            select(Loan)
            .where(Loan.loan_date < threshold, _outstanding())
            .order_by(Loan.id)
        )
        return list(self.session.exec(statement).all())

    def count(self, outstanding_only: bool = False) -> int:
        statement = select(func.count()).select_from(Loan)
        if outstanding_only:
            statement = statement.where(_outstanding())
        return self.session.exec(statement).one()
