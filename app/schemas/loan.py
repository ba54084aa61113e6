from pydantic import BaseModel
from typing import Optional
from datetime import date

class BorrowRequest(BaseModel):
    user_id: int
    book_id: int

class ReturnLoanRequest(BaseModel):
    return_date: Optional[date] = None

class LoanResponse(BaseModel):
    id: int
    user_id: int
    book_id: int
    loan_date: date
    due_date: date
    return_date: Optional[date] = None
    
    class Config:
        from_attributes = True

class UserActivityEntry(BaseModel):
    """A loan as seen from its borrower; user_id is implied."""
    id: int
    book_id: int
    loan_date: date
    due_date: date
    return_date: Optional[date] = None
    
    class Config:
        from_attributes = True
