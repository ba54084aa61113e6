import logging
from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.book import Book, AVAILABLE, BORROWED
from app.models.loan import Loan
from app.models.reservation import Reservation
from app.models.user import User
from app.services.errors import (
    BookReserved,
    BookUnavailable,
    NotFound,
    StoreError,
    require_id,
)
from app.services.transaction import store_errors, transaction
from app.utils.timezone import today

logger = logging.getLogger(__name__)

DEFAULT_LOAN_PERIOD = timedelta(days=14)


class LendingService:
    """State transitions on the loan/reservation graph.

    Each mutating operation runs in a single database transaction, so the
    checks it makes and the rows it writes are committed together or not at
    all.
    """

    def __init__(
        self,
        db: Session,
        loan_period: timedelta = DEFAULT_LOAN_PERIOD,
        clock: Callable[[], date] = today,
    ):
        self.db = db
        self.loan_period = loan_period
        self.clock = clock

    def borrow(self, user_id: int, book_id: int) -> Loan:
        """Lend a book to a user.

        Fails with BookReserved when another user holds a reservation on the
        book and with BookUnavailable while the book is out on an open loan.
        The borrower's own reservation, if any, is consumed.
        """
        require_id("user_id", user_id)
        require_id("book_id", book_id)

        with transaction(self.db):
            reservation = self.db.query(Reservation).filter(
                Reservation.book_id == book_id
            ).first()
            if reservation is not None and reservation.user_id != user_id:
                raise BookReserved(book_id)

            self._get_user(user_id)
            book = self._get_book(book_id, for_update=True)

            open_loan = self.db.query(Loan).filter(
                Loan.book_id == book_id,
                Loan.return_date.is_(None)
            ).first()
            if open_loan is not None:
                raise BookUnavailable(book_id)

            loan_date = self.clock()
            loan = Loan(
                user_id=user_id,
                book_id=book_id,
                loan_date=loan_date,
                due_date=loan_date + self.loan_period,
            )
            self.db.add(loan)
            book.availability_status = BORROWED

            if reservation is not None:
                logger.info(f"Reservation {reservation.id} fulfilled by loan of book {book_id}")
                self.db.delete(reservation)

        with store_errors():
            self.db.refresh(loan)
        logger.info(f"Book {book_id} lent to user {user_id} as loan {loan.id}, due {loan.due_date}")
        return loan

    def return_loan(self, loan_id: int, return_date: Optional[date]) -> Loan:
        """Record the return date of a loan and re-read it.

        A None return_date leaves the row untouched. Returning an already
        returned loan overwrites the previous date.
        """
        require_id("loan_id", loan_id)

        with transaction(self.db):
            loan = self.db.query(Loan).filter(Loan.id == loan_id).with_for_update().first()
            if loan is None:
                raise NotFound("loan")

            if return_date is not None:
                if loan.return_date is not None:
                    logger.warning(
                        f"Loan {loan_id} already returned on {loan.return_date}, overwriting with {return_date}"
                    )
                loan.return_date = return_date
                self.db.flush()
                self._sync_availability(loan.book_id)

        with store_errors():
            self.db.refresh(loan)
        return loan

    def reserve(self, user_id: int, book_id: int) -> Reservation:
        """Hold a book for a user.

        A book carries at most one reservation. Reserving a book already held
        by the same user returns the existing reservation.
        """
        require_id("user_id", user_id)
        require_id("book_id", book_id)

        try:
            with transaction(self.db):
                existing = self._find_reservation(book_id)
                if existing is not None:
                    if existing.user_id != user_id:
                        raise BookReserved(book_id)
                    reservation = existing
                else:
                    self._get_user(user_id)
                    self._get_book(book_id)
                    reservation = Reservation(user_id=user_id, book_id=book_id)
                    self.db.add(reservation)
        except StoreError as e:
            if not isinstance(e.__cause__, IntegrityError):
                raise
            # Either a concurrent reserve on the same book won the unique
            # constraint, or a referenced row vanished mid-transaction
            with store_errors():
                winner = self._find_reservation(book_id)
            if winner is None:
                raise
            if winner.user_id != user_id:
                raise BookReserved(book_id) from e.__cause__
            reservation = winner

        with store_errors():
            self.db.refresh(reservation)
        return reservation

    def cancel_reservation(self, reservation_id: int) -> None:
        require_id("id", reservation_id)

        with transaction(self.db):
            deleted = self.db.query(Reservation).filter(
                Reservation.id == reservation_id
            ).delete(synchronize_session=False)

        if not deleted:
            logger.debug(f"Reservation {reservation_id} not found, nothing to cancel")

    def _find_reservation(self, book_id: int) -> Optional[Reservation]:
        return self.db.query(Reservation).filter(Reservation.book_id == book_id).first()

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("user")
        return user

    def _get_book(self, book_id: int, for_update: bool = False) -> Book:
        query = self.db.query(Book).filter(Book.id == book_id)
        if for_update:
            query = query.with_for_update()
        book = query.first()
        if book is None:
            raise NotFound("book")
        return book

    def _sync_availability(self, book_id: int) -> None:
        book = self.db.get(Book, book_id)
        if book is None:
            return
        still_out = self.db.query(Loan).filter(
            Loan.book_id == book_id,
            Loan.return_date.is_(None)
        ).first()
        book.availability_status = BORROWED if still_out is not None else AVAILABLE
