"""FastAPI router for /api/loans."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from library.models import Loan
from library.pagination import PageRequest
from library.repository import LoanFilter
from library.services import BookService, LoanService

from .dependencies import get_book_service, get_loan_service, page_request
from .schemas import LoanIn, LoanOut, PageOut, ReturnedLoanIn

router = APIRouter(tags=["loans"])


@router.post("", status_code=201, response_model=int)
def create_loan(
    body: LoanIn,
    book_service: BookService = Depends(get_book_service),
    loan_service: LoanService = Depends(get_loan_service),
):
    """Lend the book with the given ISBN. Returns the new loan id."""
    book = book_service.get_by_isbn(body.isbn)
    if book is None:
        raise HTTPException(status_code=400, detail="Book not found for passed isbn")

    loan = Loan(
        book_id=book.id,
        customer=body.customer,
        customer_email=body.email,
        loan_date=date.today(),
    )
    return loan_service.save(loan).id


@router.patch("/{loan_id}", response_model=LoanOut)
def return_book(
    loan_id: int,
    body: ReturnedLoanIn,
    service: LoanService = Depends(get_loan_service),
):
    loan = service.get_by_id(loan_id)
    if loan is None:
        raise HTTPException(status_code=404)
    return LoanOut.from_loan(service.set_returned(loan, body.returned))


@router.get("", response_model=PageOut[LoanOut])
def find_loans(
    isbn: Optional[str] = None,
    customer: Optional[str] = None,
    page: PageRequest = Depends(page_request),
    service: LoanService = Depends(get_loan_service),
):
    """Loans matching the ISBN or the customer (either filter suffices)."""
    result = service.find(LoanFilter(isbn=isbn, customer=customer), page)
    return PageOut[LoanOut].from_page(result.map(LoanOut.from_loan))
