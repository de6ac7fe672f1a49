"""Exceptions raised by the libraryapi services."""

from __future__ import annotations


class LibraryError(Exception):
    """Base class for libraryapi errors."""


class BusinessError(LibraryError):
    """A business rule was violated. The message is shown to the API client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateIsbnError(BusinessError):
    def __init__(self, message: str = "Isbn already registered"):
        super().__init__(message)


class BookAlreadyLoanedError(BusinessError):
    def __init__(self, message: str = "Book already loaned"):
        super().__init__(message)


class InvalidArgumentError(LibraryError, ValueError):
    """Caller passed an entity without the identifier the operation needs."""


class LoanAlreadyReturnedError(BusinessError):
    """A returned loan cannot go back to outstanding."""

    def __init__(self, message: str = "Loan already returned"):
        super().__init__(message)


class BookHasLoansError(BusinessError):
    def __init__(self, message: str = "Book has loans and cannot be deleted"):
        super().__init__(message)
