"""Read-heavy loan reports served cache-aside from Redis.

On a miss the report is computed from the database and returned right away;
a background job then writes it to Redis with the report's TTL. Writes never
invalidate a cached report, so a report may lag the database by up to its
TTL. Concurrent misses on the same key each compute the report and each
overwrite the cached copy; the overwrite is atomic, so the key never holds a
mix of the two.
"""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import date, timedelta
from typing import Callable, List, Optional, Set

import pydantic
import redis
from pydantic import TypeAdapter
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from app.config import ReportCacheConfig
from app.models.book import Book
from app.models.loan import Loan
from app.schemas.loan import LoanResponse, UserActivityEntry
from app.schemas.report import PopularBook
from app.services.errors import require_id
from app.services.transaction import store_errors
from app.utils.timezone import today

logger = logging.getLogger(__name__)

LoanList = TypeAdapter(List[LoanResponse])

# Cached in place of an empty ranking, since Redis has no empty lists
EMPTY_RANKING = ""


class CacheFiller:
    """Populates cache keys on a background thread pool.

    Jobs are detached from the request that submitted them: failures are
    logged and dropped, never retried. At most `max_pending` jobs are queued
    or running; a submit beyond that is dropped. A job that has not finished
    `timeout` seconds after it was submitted is abandoned, whether it is still
    queued or blocked on Redis. The Redis client handed in should carry socket
    timeouts no longer than `timeout`.
    """

    def __init__(
        self,
        client: redis.Redis,
        max_workers: int = 2,
        max_pending: int = 32,
        timeout: float = 4.0,
    ):
        self.client = client
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cache-fill")
        self._slots = threading.BoundedSemaphore(max_pending)
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def submit(
        self,
        key: str,
        write: Callable[[redis.client.Pipeline], None],
        ttl: timedelta,
    ) -> Optional[Future]:
        """Schedule `write` to replace `key`, then expire it after `ttl`.

        Returns None when the job was dropped because the queue is full.
        """
        if not self._slots.acquire(blocking=False):
            logger.warning(f"Cache fill queue full, skipping fill of {key}")
            return None
        deadline = time.monotonic() + self.timeout
        try:
            future = self._executor.submit(self._fill, key, write, ttl, deadline)
        except RuntimeError:
            self._slots.release()
            logger.warning(f"Cache filler shut down, skipping fill of {key}")
            return None
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every job submitted so far has finished."""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        """Stop accepting jobs, drop queued ones and wait for running ones."""
        self._executor.shutdown(wait=True, cancel_futures=True)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        self._slots.release()

    def _fill(
        self,
        key: str,
        write: Callable[[redis.client.Pipeline], None],
        ttl: timedelta,
        deadline: float,
    ) -> bool:
        if time.monotonic() > deadline:
            logger.warning(f"Cache fill of {key} waited past its {self.timeout}s deadline, skipping")
            return False
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                write(pipe)
                pipe.pexpire(key, ttl)
                pipe.execute()
        except Exception as e:
            logger.warning(f"Failed to populate cache key {key}: {e}", exc_info=True)
            return False
        logger.debug(f"Populated cache key {key} (ttl {ttl})")
        return True


class ReportService:
    def __init__(
        self,
        db: Session,
        cache: redis.Redis,
        filler: CacheFiller,
        config: ReportCacheConfig = ReportCacheConfig(),
        clock: Callable[[], date] = today,
    ):
        self.db = db
        self.cache = cache
        self.filler = filler
        self.config = config
        self.clock = clock

    def get_overdue_loans(self) -> List[LoanResponse]:
        """Loans still out past their due date, plus loans that came back late."""
        key = self.config.overdue_loans_key
        cached = self._read_string(key)
        if cached is not None:
            try:
                loans = LoanList.validate_json(cached)
            except pydantic.ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            else:
                logger.info("Used cache to respond overdue loans")
                return loans

        current_date = self.clock()
        with store_errors():
            rows = self.db.query(Loan).filter(
                or_(
                    and_(Loan.return_date.is_(None), Loan.due_date < current_date),
                    Loan.return_date > Loan.due_date,
                )
            ).order_by(Loan.id).all()
        loans = [LoanResponse.model_validate(row) for row in rows]

        self.filler.submit(
            key,
            lambda pipe: pipe.set(key, LoanList.dump_json(loans)),
            self.config.overdue_loans_ttl,
        )
        return loans

    def get_popular_books(self) -> List[PopularBook]:
        """Most borrowed books, by number of loans. Ties keep database order."""
        key = self.config.popular_books_key
        cached = self._read_list(key)
        if cached is not None:
            try:
                books = [PopularBook.model_validate_json(item) for item in cached if item != EMPTY_RANKING]
            except pydantic.ValidationError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            else:
                logger.info("Used cache to respond popular books")
                return books

        borrow_count = func.count(Loan.id).label("borrow_count")
        with store_errors():
            rows = self.db.query(
                Book.id.label("book_id"),
                Book.title,
                borrow_count,
            ).join(
                Loan, Loan.book_id == Book.id
            ).group_by(
                Book.id, Book.title
            ).order_by(
                borrow_count.desc()
            ).limit(self.config.popular_books_limit).all()
        books = [
            PopularBook(book_id=row.book_id, title=row.title, borrow_count=row.borrow_count)
            for row in rows
        ]

        entries = [book.model_dump_json() for book in books] or [EMPTY_RANKING]
        self.filler.submit(
            key,
            lambda pipe: pipe.rpush(key, *entries),
            self.config.popular_books_ttl,
        )
        return books

    def get_user_activity(self, user_id: int) -> List[UserActivityEntry]:
        require_id("user_id", user_id)

        with store_errors():
            rows = self.db.query(
                Loan.id,
                Loan.book_id,
                Loan.loan_date,
                Loan.due_date,
                Loan.return_date,
            ).filter(Loan.user_id == user_id).order_by(Loan.id).all()
        return [UserActivityEntry.model_validate(row) for row in rows]

    def _read_string(self, key: str) -> Optional[str]:
        try:
            return self.cache.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read of {key} failed, computing report: {e}")
            return None

    def _read_list(self, key: str) -> Optional[List[str]]:
        try:
            if not self.cache.exists(key):
                return None
            items = self.cache.lrange(key, 0, -1)
        except redis.RedisError as e:
            logger.warning(f"Cache read of {key} failed, computing report: {e}")
            return None
        # The key can expire between EXISTS and LRANGE
        return items or None
