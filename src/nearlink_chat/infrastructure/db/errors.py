from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from nearlink_chat.application.exceptions import StoreFailure

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver/ORM errors raised inside the block into StoreFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store failure during %s: %s", operation, exc)
        raise StoreFailure(f"{operation} failed") from exc
