"""SQLModel database models for libraryapi."""

from datetime import date
from typing import Optional, List
from sqlmodel import Field, SQLModel, Relationship


class BookBase(SQLModel):
    title: str
    author: str
    # Uniqueness is enforced by BookService.save, not by the schema
    isbn: str = Field(index=True)


class Book(BookBase, table=True):
    __tablename__ = "books"
    id: Optional[int] = Field(default=None, primary_key=True)

    # Read-only back-reference; Loan owns the relationship. passive_deletes
    # leaves loans untouched on delete so the foreign key rejects it.
    loans: List["Loan"] = Relationship(
        back_populates="book", sa_relationship_kwargs={"passive_deletes": "all"}
    )


class LoanBase(SQLModel):
    customer: str
    customer_email: Optional[str] = None
    loan_date: date
    returned: Optional[bool] = None  # None/False = outstanding, True = returned
    book_id: Optional[int] = Field(default=None, foreign_key="books.id", index=True)


class Loan(LoanBase, table=True):
    __tablename__ = "loans"
    id: Optional[int] = Field(default=None, primary_key=True)

    book: Optional[Book] = Relationship(back_populates="loans")
