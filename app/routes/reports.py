from fastapi import APIRouter, Depends
from typing import List
from app.dependencies import get_report_service
from app.schemas.loan import LoanResponse, UserActivityEntry
from app.schemas.report import PopularBook
from app.services.reports import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])

@router.get("/overdue-loans", response_model=List[LoanResponse])
def get_overdue_loans(reports: ReportService = Depends(get_report_service)):
    """Loans past their due date, open or returned late. May lag writes until the cached copy expires."""
    return reports.get_overdue_loans()

@router.get("/popular-books", response_model=List[PopularBook])
def get_popular_books(reports: ReportService = Depends(get_report_service)):
    """Top borrowed books. May lag writes until the cached copy expires."""
    return reports.get_popular_books()

@router.get("/user-activity/{user_id}", response_model=List[UserActivityEntry])
def get_user_activity(user_id: int, reports: ReportService = Depends(get_report_service)):
    """All loans of a user, newest last."""
    return reports.get_user_activity(user_id)
