"""Run synchronous repository calls from async handlers, one session per call."""
import asyncio
import logging
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import SessionFactory
from location_core.errors import StorageError

LOG = logging.getLogger(__name__)

T = TypeVar("T")


def _call_in_session(session_factory: SessionFactory, fn: Callable[..., T], *args: Any) -> T:
    session: Session = session_factory()
    try:
        return fn(session, *args)
    except SQLAlchemyError as e:
        LOG.exception("Storage call %s failed: %s", getattr(fn, "__name__", fn), e)
        raise StorageError(str(e)) from e
    finally:
        session.close()


async def run_in_session(session_factory: SessionFactory, fn: Callable[..., T], *args: Any) -> T:
    """
    Call fn(session, *args) in a worker thread on a fresh session and close it afterwards.
    Independent reads can be awaited together with asyncio.gather; each gets its own connection.
    SQLAlchemy errors are re-raised as StorageError.
    """
    return await asyncio.to_thread(_call_in_session, session_factory, fn, *args)
