from fastapi import APIRouter, Depends, status
from app.dependencies import get_lending_service
from app.schemas.loan import BorrowRequest, ReturnLoanRequest, LoanResponse
from app.services.lending import LendingService

router = APIRouter(prefix="/api/v1/loans", tags=["Loans"])

@router.post("/", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def borrow_book(
    loan_data: BorrowRequest,
    lending: LendingService = Depends(get_lending_service)
):
    """Lend a book to a user (checkout). Due date is set by the library's loan period."""
    loan = lending.borrow(loan_data.user_id, loan_data.book_id)
    return LoanResponse.model_validate(loan)

@router.put("/{loan_id}", response_model=LoanResponse)
def return_loan(
    loan_id: int,
    return_data: ReturnLoanRequest,
    lending: LendingService = Depends(get_lending_service)
):
    """Record the return of a loan."""
    loan = lending.return_loan(loan_id, return_data.return_date)
    return LoanResponse.model_validate(loan)
