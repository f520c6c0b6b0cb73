"""Request-scoped context for integration calls.

Holds the correlation id that ties together every attempt, audit event and
log record of one logical operation (for example, one sync of an ad
account). Context variables are task-local, so concurrent ``execute``
calls each see their own id.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from ulid import ULID

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return a new sortable correlation id."""
    return str(ULID())


def get_correlation_id() -> str:
    """Return the current correlation id, or an empty string."""
    return correlation_id.get()


@contextmanager
def correlation_context(cid: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block.

    Example:
        with correlation_context() as cid:
            await client.get("/me/adaccounts", operation="list_ad_accounts")
    """
    value = cid or generate_correlation_id()
    token = correlation_id.set(value)
    try:
        yield value
    finally:
        correlation_id.reset(token)
