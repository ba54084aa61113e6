from .user import UserCreate, UserUpdate, UserResponse
from .book import BookCreate, BookUpdate, BookResponse
from .loan import BorrowRequest, ReturnLoanRequest, LoanResponse, UserActivityEntry
from .reservation import ReserveRequest, ReservationResponse
from .report import PopularBook

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse",
    "BookCreate", "BookUpdate", "BookResponse",
    "BorrowRequest", "ReturnLoanRequest", "LoanResponse", "UserActivityEntry",
    "ReserveRequest", "ReservationResponse",
    "PopularBook",
]
