import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.loan import Loan
from app.models.reservation import Reservation
from app.models.user import User
from app.services.errors import (
    INVALID_EMAIL,
    TOO_SHORT,
    HasLoanHistory,
    NotFound,
    UserExists,
    ValidationError,
    require_id,
    require_text,
)
from app.services.security import get_password_hash
from app.services.transaction import store_errors, transaction

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@]+@[^@]+\.[^@]+$")
MIN_PASSWORD_LENGTH = 3
DEFAULT_ROLE = "member"


def _validate_email(email: str) -> None:
    require_text("email", email)
    if not EMAIL_RE.match(email):
        raise ValidationError("email", INVALID_EMAIL)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, email: str, password: str, role: Optional[str] = None) -> User:
        require_text("name", name)
        _validate_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError("password", TOO_SHORT)

        user = User(
            name=name,
            email=email,
            password=get_password_hash(password),
            role=role or DEFAULT_ROLE,
        )
        with transaction(self.db):
            if self.db.query(User).filter(User.email == email).first() is not None:
                raise UserExists(email)
            self.db.add(user)
            try:
                self.db.flush()
            except IntegrityError as e:
                raise UserExists(email) from e

        with store_errors():
            self.db.refresh(user)
        logger.info(f"User {user.id} created with role {user.role}")
        return user

    def get(self, user_id: int) -> User:
        require_id("id", user_id)

        with store_errors():
            user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFound("user")
        return user

    def update(self, user_id: int, name: str, email: str, role: Optional[str] = None) -> User:
        require_id("id", user_id)
        require_text("name", name)
        _validate_email(email)

        with transaction(self.db):
            user = self.db.query(User).filter(User.id == user_id).with_for_update().first()
            if user is None:
                raise NotFound("user")
            taken = self.db.query(User).filter(User.email == email, User.id != user_id).first()
            if taken is not None:
                raise UserExists(email)
            user.name = name
            user.email = email
            if role:
                user.role = role

        with store_errors():
            self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        require_id("id", user_id)

        with transaction(self.db):
            if self.db.query(Loan).filter(Loan.user_id == user_id).first() is not None:
                raise HasLoanHistory("user", user_id)
            self.db.query(Reservation).filter(Reservation.user_id == user_id).delete(synchronize_session=False)
            try:
                self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            except IntegrityError as e:
                raise HasLoanHistory("user", user_id) from e
