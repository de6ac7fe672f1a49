"""Tests for BookService business rules."""

from unittest.mock import Mock

import pytest

from library.errors import (
    BookHasLoansError,
    BusinessError,
    DuplicateIsbnError,
    InvalidArgumentError,
)
from library.models import Book
from library.pagination import Page, PageRequest
from library.repository import BookFilter, BookRepository
from library.services import BookService


def _new_book(**overrides) -> Book:
    data = {"title": "A Cabana", "author": "Pâmela", "isbn": "034"}
    data.update(overrides)
    return Book(**data)


@pytest.fixture
def repository():
    return Mock(spec=BookRepository)


@pytest.fixture
def service(repository):
    return BookService(repository)


def test_save_book(service, repository):
    book = _new_book()
    repository.exists_by_isbn.return_value = False
    repository.save.return_value = _new_book(id=1)

    saved = service.save(book)

    assert saved.id == 1
    assert saved.title == "A Cabana"
    assert saved.author == "Pâmela"
    assert saved.isbn == "034"
    repository.save.assert_called_once_with(book)


def test_save_book_with_duplicated_isbn_fails(service, repository):
    book = _new_book()
    repository.exists_by_isbn.return_value = True

    with pytest.raises(DuplicateIsbnError) as excinfo:
        service.save(book)

    assert isinstance(excinfo.value, BusinessError)
    assert excinfo.value.message == "Isbn already registered"
    repository.save.assert_not_called()


def test_get_by_id(service, repository):
    repository.get_by_id.return_value = _new_book(id=1)

    book = service.get_by_id(1)

    assert book is not None
    assert book.id == 1
    assert book.isbn == "034"
    repository.get_by_id.assert_called_once_with(1)


def test_get_by_id_returns_none_when_missing(service, repository):
    repository.get_by_id.return_value = None

    assert service.get_by_id(1) is None


def test_delete_book(service, repository):
    book = _new_book(id=1)
    repository.has_loans.return_value = False

    service.delete(book)

    repository.delete.assert_called_once_with(book)


def test_delete_book_without_id_fails(service, repository):
    book = _new_book()

    with pytest.raises(InvalidArgumentError):
        service.delete(book)

    repository.delete.assert_not_called()


def test_update_book(service, repository):
    updating = Book(id=1, title="", author="", isbn="")
    repository.exists_by_isbn_on_other_book.return_value = False
    repository.save.return_value = _new_book(id=1)

    updated = service.update(updating)

    assert updated.id == 1
    assert updated.title == "A Cabana"
    repository.save.assert_called_once_with(updating)


def test_update_book_without_id_fails(service, repository):
    book = _new_book()

    with pytest.raises(InvalidArgumentError):
        service.update(book)

    repository.save.assert_not_called()


def test_invalid_argument_is_a_value_error(service):
    with pytest.raises(ValueError):
        service.update(None)


def test_find_books(service, repository):
    book = _new_book(id=1)
    request = PageRequest(page=0, size=10)
    repository.find.return_value = Page(content=[book], total_elements=1, request=request)
    criteria = BookFilter(title="Cabana")

    result = service.find(criteria, request)

    assert result.total_elements == 1
    assert result.content == [book]
    assert result.request.page == 0
    assert result.request.size == 10
    repository.find.assert_called_once_with(criteria, request)


def test_get_by_isbn(service, repository):
    repository.get_by_isbn.return_value = Book(id=1, title="t", author="a", isbn="123")

    book = service.get_by_isbn("123")

    assert book.id == 1
    assert book.isbn == "123"
    repository.get_by_isbn.assert_called_once_with("123")


def test_update_book_to_isbn_of_another_book_fails(service, repository):
    updating = _new_book(id=1, isbn="002")
    repository.exists_by_isbn_on_other_book.return_value = True

    with pytest.raises(DuplicateIsbnError) as excinfo:
        service.update(updating)

    assert excinfo.value.message == "Isbn already registered"
    repository.exists_by_isbn_on_other_book.assert_called_once_with("002", 1)
    repository.save.assert_not_called()


def test_delete_book_with_loans_fails(service, repository):
    book = _new_book(id=1)
    repository.has_loans.return_value = True

    with pytest.raises(BookHasLoansError):
        service.delete(book)

    repository.delete.assert_not_called()
