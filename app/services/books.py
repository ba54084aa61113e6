import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.book import Book, AVAILABLE, AVAILABILITY_STATUSES
from app.models.loan import Loan
from app.models.reservation import Reservation
from app.services.errors import (
    INVALID_CHOICE,
    HasLoanHistory,
    NotFound,
    ValidationError,
    require_id,
    require_text,
)
from app.services.transaction import store_errors, transaction

logger = logging.getLogger(__name__)


class BookService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, title: str, author: str, isbn: str) -> Book:
        require_text("title", title)
        require_text("author", author)
        require_text("isbn", isbn)

        book = Book(title=title, author=author, isbn=isbn, availability_status=AVAILABLE)
        with transaction(self.db):
            self.db.add(book)
        with store_errors():
            self.db.refresh(book)
        logger.info(f"Book {book.id} created: {title!r}")
        return book

    def get(self, book_id: int) -> Book:
        require_id("id", book_id)

        with store_errors():
            book = self.db.query(Book).filter(Book.id == book_id).first()
        if book is None:
            raise NotFound("book")
        return book

    def update(
        self,
        book_id: int,
        title: str,
        author: str,
        isbn: str,
        availability_status: Optional[str] = None,
    ) -> Book:
        """Overwrite a book's fields; an empty availability_status keeps the current one."""
        require_id("id", book_id)
        require_text("title", title)
        require_text("author", author)
        require_text("isbn", isbn)
        if availability_status and availability_status not in AVAILABILITY_STATUSES:
            raise ValidationError("availability_status", INVALID_CHOICE)

        with transaction(self.db):
            book = self.db.query(Book).filter(Book.id == book_id).with_for_update().first()
            if book is None:
                raise NotFound("book")
            book.title = title
            book.author = author
            book.isbn = isbn
            if availability_status:
                book.availability_status = availability_status

        with store_errors():
            self.db.refresh(book)
        return book

    def delete(self, book_id: int) -> None:
        """Delete a book that was never lent; its reservation goes with it."""
        require_id("id", book_id)

        with transaction(self.db):
            if self.db.query(Loan).filter(Loan.book_id == book_id).first() is not None:
                raise HasLoanHistory("book", book_id)
            self.db.query(Reservation).filter(Reservation.book_id == book_id).delete(synchronize_session=False)
            try:
                self.db.query(Book).filter(Book.id == book_id).delete(synchronize_session=False)
            except IntegrityError as e:
                # A loan was written after the check above
                raise HasLoanHistory("book", book_id) from e
