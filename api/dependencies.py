"""FastAPI dependencies shared by the book and loan routers."""

from __future__ import annotations

from fastapi import Depends, Query
from sqlmodel import Session

from library.config import LoansConfig, get_config
from library.database import get_session
from library.pagination import PageRequest
from library.repository import BookRepository, LoanRepository
from library.services import BookService, LoanService

MAX_PAGE_SIZE = 100


def _late_after_days() -> int:
    try:
        return get_config().loans.late_after_days
    except FileNotFoundError:
        return LoansConfig().late_after_days


def get_book_service(session: Session = Depends(get_session)) -> BookService:
    return BookService(BookRepository(session))


def get_loan_service(session: Session = Depends(get_session)) -> LoanService:
    return LoanService(LoanRepository(session), late_after_days=_late_after_days())


def page_request(
    page: int = Query(0, ge=0, description="0-based page number"),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
) -> PageRequest:
    return PageRequest(page=page, size=size)
