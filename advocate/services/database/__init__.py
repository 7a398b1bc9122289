"""Import db instance and define utility functions."""

from contextlib import contextmanager
import math
from typing import Any, Dict, Generator, Tuple

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Query

from .models import db, DBUser, DBCase, DBConversation, DBDocument, \
    DBJournalEntry, default_preferences

__all__ = ['db', 'DBUser', 'DBCase', 'DBConversation', 'DBDocument',
           'DBJournalEntry', 'default_preferences',
           'init_app', 'create_all', 'drop_all', 'transaction', 'paginate']


class DatabaseUnavailable(IOError):
    """The database could not be reached or refused the query."""


def init_app(app: Any) -> None:
    """Set configuration defaults and attach the db to the application."""
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///advocate.db')
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


@contextmanager
def transaction() -> Generator[Any, None, None]:
    """
    Run a unit of work, committing on success and rolling back on failure.

    Raises
    ------
    :class:`DatabaseUnavailable`
        When the database could not be reached.

    """
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        db.session.rollback()
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    except Exception:
        db.session.rollback()
        raise


def paginate(query: Query, page: int, limit: int) -> Tuple[list, Dict[str, int]]:
    """
    Get one page of ``query`` results, with the pagination summary.

    Returns
    -------
    list
        Rows on the requested page.
    dict
        ``current``, ``total`` (pages), ``count`` and ``totalRecords``.

    """
    try:
        total = query.order_by(None).count()
        rows = query.offset((page - 1) * limit).limit(limit).all()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    return rows, {
        'current': page,
        'total': int(math.ceil(total / limit)) if limit else 0,
        'count': len(rows),
        'totalRecords': total
    }
