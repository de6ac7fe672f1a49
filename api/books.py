"""FastAPI router for /api/books."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from library.models import Book
from library.pagination import PageRequest
from library.repository import BookFilter
from library.services import BookService, LoanService

from .dependencies import get_book_service, get_loan_service, page_request
from .schemas import BookIn, BookOut, LoanOut, PageOut

router = APIRouter(tags=["books"])


def _get_book_or_404(service: BookService, book_id: int) -> Book:
    book = service.get_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404)
    return book


@router.post("", status_code=201, response_model=BookOut)
def create_book(body: BookIn, service: BookService = Depends(get_book_service)):
    book = service.save(Book(title=body.title, author=body.author, isbn=body.isbn))
    return BookOut.model_validate(book)


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: int, service: BookService = Depends(get_book_service)):
    return BookOut.model_validate(_get_book_or_404(service, book_id))


@router.put("/{book_id}", response_model=BookOut)
def update_book(
    book_id: int, body: BookIn, service: BookService = Depends(get_book_service)
):
    book = _get_book_or_404(service, book_id)
    book.title = body.title
    book.author = body.author
    book.isbn = body.isbn
    return BookOut.model_validate(service.update(book))


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, service: BookService = Depends(get_book_service)):
    service.delete(_get_book_or_404(service, book_id))
    return Response(status_code=204)


@router.get("", response_model=PageOut[BookOut])
def find_books(
    title: Optional[str] = None,
    author: Optional[str] = None,
    page: PageRequest = Depends(page_request),
    service: BookService = Depends(get_book_service),
):
    """Search books; title and author are case-insensitive substring filters."""
    result = service.find(BookFilter(title=title, author=author), page)
    return PageOut[BookOut].from_page(result.map(BookOut.model_validate))


@router.get("/{book_id}/loans", response_model=PageOut[LoanOut])
def book_loans(
    book_id: int,
    page: PageRequest = Depends(page_request),
    book_service: BookService = Depends(get_book_service),
    loan_service: LoanService = Depends(get_loan_service),
):
    """Loan history of a single book."""
    book = _get_book_or_404(book_service, book_id)
    result = loan_service.get_loans_by_book(book, page)
    return PageOut[LoanOut].from_page(result.map(LoanOut.from_loan))
