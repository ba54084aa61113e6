from .user import User
from .book import Book
from .loan import Loan
from .reservation import Reservation

__all__ = [
    "User",
    "Book",
    "Loan",
    "Reservation",
]
