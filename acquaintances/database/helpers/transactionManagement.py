"""
Database Transaction Management
===============================

This module provides utilities for managing SQLAlchemy database sessions
using Python context variables and a decorator-based transaction wrapper.

It allows seamless propagation of a database session across method calls
without explicitly threading it through arguments. Methods of objects that
carry a ``session_factory`` attribute can be decorated with ``@transactional``
to ensure they run inside a managed transactional context.

Key features
~~~~~~~~~~~~
- Context variable to store the active session
- Implicit reuse of existing sessions (nested calls join the outer unit of work)
- Automatic commit and rollback handling
- Clean session closure after execution
- Decorator pattern for method-level transaction management
- Callbacks deferred until the outermost unit of work has committed

"""

import contextvars
import logging
from functools import wraps

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Context variable to store the current database session.
# This ensures a session can be passed implicitly across method calls
# without explicitly threading it through arguments.
# --------------------------------------------------------------------
db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""

AFTER_COMMIT_KEY = "acquaintances.after_commit"


def run_after_commit(callback):
    """
    Run `callback` once the active unit of work has committed.

    Outside a unit of work the callback runs immediately. Inside one it is
    queued on the session and runs after the outermost `@transactional` call
    has committed and closed the session; a rollback discards it.

    Parameters
    ----------
    callback : callable
        Zero-argument callable.
    """
    session = db_session_context.get()
    if session is None:
        callback()
        return
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(callback)


def transactional(func):
    """
    Decorator to wrap methods in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created from ``self.session_factory``,
      committed, and closed.
    - On errors, the session is rolled back and closed.
    - Callbacks queued with `run_after_commit` run after a successful commit.

    Parameters
    ----------
    func : callable
        The method to wrap. It must accept a `session` keyword argument.

    Returns
    -------
    callable
        The wrapped method, executed within a database transaction.

    Example
    -------
    >>> class Repo:
    ...     def __init__(self, session_factory):
    ...         self.session_factory = session_factory
    ...
    ...     @transactional
    ...     def add(self, verification, session=None):
    ...         session.add(verification)
    ...         return verification
    """
    @wraps(func)
    def wrap_func(self, *args, **kwargs):
        # Try to get an existing session from context
        session = db_session_context.get()
        if session is not None:
            return func(self, *args, session=session, **kwargs)

        # Create a new session if none exists
        session = self.session_factory()
        token = db_session_context.set(session)

        try:
            result = func(self, *args, session=session, **kwargs)
            session.flush()   # Push pending changes
            session.commit()  # Commit transaction
        except Exception:
            logger.debug(f"Rolling back transaction opened by {func.__qualname__}")
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        for callback in session.info.pop(AFTER_COMMIT_KEY, []):
            callback()

        return result

    return wrap_func
