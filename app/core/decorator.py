import logging
from functools import wraps

from sqlalchemy.exc import OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class DBException(Exception):
    """Persistence failure that is not a domain condition.

    Connection-level failures are transient and safe for the caller to retry.
    """

    def __init__(self, message: str, status_code: int = 500, retryable: bool = False):
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


def db_exception(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            logger.error(f"Database unavailable in {func.__name__}: {e}")
            _rollback(args)
            raise DBException("Database temporarily unavailable", 503, retryable=True)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {func.__name__}: {e}", exc_info=True)
            _rollback(args)
            raise DBException("Database error occurred", 500)

    return wrapper


def _rollback(args):
    # Service methods are bound to an instance holding the session as `db`
    db = getattr(args[0], "db", None) if args else None
    if db is not None:
        db.rollback()
