from datetime import date, datetime
import pytz

from app.config import settings

LIBRARY_TZ = pytz.timezone(settings.timezone)

def now_local() -> datetime:
    """Get current datetime in the library's timezone."""
    return datetime.now(LIBRARY_TZ)

def today() -> date:
    """Get the current calendar date in the library's timezone."""
    return now_local().date()
