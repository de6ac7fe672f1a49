"""Request and response bodies for the REST API."""

from __future__ import annotations

from datetime import date
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from library.models import Book, Loan
from library.pagination import Page

T = TypeVar("T")


class BookIn(BaseModel):
    """Body of POST/PUT /api/books."""

    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    isbn: str = Field(min_length=1)


class BookOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    title: str
    author: str
    isbn: str


class LoanIn(BaseModel):
    """Body of POST /api/loans."""

    isbn: str = Field(min_length=1)
    customer: str = Field(min_length=1)
    email: Optional[str] = None


class ReturnedLoanIn(BaseModel):
    """Body of PATCH /api/loans/{id}."""

    returned: bool


class LoanOut(BaseModel):
    id: int
    isbn: Optional[str] = None
    customer: str
    email: Optional[str] = None
    loan_date: date
    returned: Optional[bool] = None
    book: Optional[BookOut] = None

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanOut":
        book: Optional[Book] = loan.book
        return cls(
            id=loan.id,
            isbn=book.isbn if book else None,
            customer=loan.customer,
            email=loan.customer_email,
            loan_date=loan.loan_date,
            returned=loan.returned,
            book=BookOut.model_validate(book) if book else None,
        )


class Pageable(BaseModel):
    page_number: int
    page_size: int


class PageOut(BaseModel, Generic[T]):
    content: List[T]
    total_elements: int
    total_pages: int
    pageable: Pageable

    @classmethod
    def from_page(cls, page: Page) -> "PageOut":
        return cls(
            content=page.content,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            pageable=Pageable(
                page_number=page.request.page,
                page_size=page.request.size,
            ),
        )


class ErrorsOut(BaseModel):
    errors: List[str]
