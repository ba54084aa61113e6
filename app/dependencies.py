import redis
from fastapi import Depends
from sqlalchemy.orm import Session

from app.cache import get_cache_filler, get_redis
from app.config import settings
from app.database import get_db
from app.services.books import BookService
from app.services.lending import LendingService
from app.services.reports import CacheFiller, ReportService
from app.services.users import UserService


def get_lending_service(db: Session = Depends(get_db)) -> LendingService:
    return LendingService(db, loan_period=settings.loan_period)


def get_report_service(
    db: Session = Depends(get_db),
    cache: redis.Redis = Depends(get_redis),
    filler: CacheFiller = Depends(get_cache_filler),
) -> ReportService:
    return ReportService(db, cache, filler, config=settings.report_cache())


def get_book_service(db: Session = Depends(get_db)) -> BookService:
    return BookService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
