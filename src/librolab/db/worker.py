"""
Runs data-access calls away from the UI thread.

The adapters hold a single connection, so calls must not overlap. The worker
owns one background thread and queues every call on it; each call returns a
``concurrent.futures.Future`` that the presentation layer can wait on or hook
with ``add_done_callback`` to hand the result back to its own update thread.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from librolab.db.interface import BooksDb

logger = logging.getLogger(__name__)


class BooksDbWorker:
    """
    Serializes calls to one adapter on one background thread.

    Usage:
        with BooksDbWorker(books_db) as worker:
            future = worker.submit("find_books_by_title", "databases")
            future.add_done_callback(lambda f: ui.call_soon(show, f))
    """

    def __init__(self, books_db: BooksDb, disconnect_on_shutdown: bool = True) -> None:
        self.books_db = books_db
        self._disconnect_on_shutdown = disconnect_on_shutdown
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="books-db")

    def submit(self, operation: str, *args: Any, **kwargs: Any) -> Future:
        """
        Queue one contract call.

        Args:
            operation: Name of a BooksDb method, e.g. "add_review".
            *args, **kwargs: Arguments for that method.

        Returns:
            Future resolving to the method's result, or raising its BooksDbError.

        Raises:
            AttributeError: If ``operation`` is not a method of the adapter.
        """
        method = getattr(self.books_db, operation)
        if not callable(method):
            raise AttributeError(f"{type(self.books_db).__name__}.{operation} is not callable")
        logger.debug(f"Queueing {operation}")
        return self._executor.submit(method, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting calls, wait for queued ones and optionally disconnect."""
        self._executor.shutdown(wait=wait)
        if self._disconnect_on_shutdown:
            self.books_db.disconnect()

    def __enter__(self) -> "BooksDbWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
