# dairy_ops/services/common/unit_of_work.py
"""
Transaction boundary for the service layer.

Each service operation opens one UnitOfWork; every row it stages (order,
subscriptions, entries and ledger rows, or a skip with its refund)
commits or rolls back together.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dairy_ops.repositories.base import BaseRepository

from .errors import TransactionError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    One session per ``with`` block.

        >>> with UnitOfWork(session_factory) as uow:
        ...     member = uow.get_repo(MemberRepository).get_for_update(member_id)

    Leaving the block normally commits (unless ``auto_commit=False``, used
    for reads). An exception rolls back and propagates. A failed commit is
    re-raised as TransactionError.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        auto_commit: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._auto_commit = auto_commit

        self.session: Optional[Session] = None
        self._committed = False
        self._rolled_back = False
        self._repos: dict[Type[BaseRepository], BaseRepository] = {}

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")
        self.session = self._session_factory()
        self._committed = False
        self._rolled_back = False
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False
        try:
            if exc_type is not None:
                self.session.rollback()
                self._rolled_back = True
                logger.warning(f"UnitOfWork rolled back due to {exc_type.__name__}")
            elif self._auto_commit:
                self._commit()
        finally:
            self.session.close()
            self.session = None
            self._repos.clear()
        return False

    def _commit(self) -> None:
        try:
            self.session.commit()
            self._committed = True
        except SQLAlchemyError as exc:
            logger.error(f"Commit failed: {exc}")
            self.session.rollback()
            self._rolled_back = True
            raise TransactionError("Failed to commit transaction", exc) from exc

    def flush(self) -> None:
        """
        Send staged changes to the database without committing.

        Raises:
            TransactionError: the database rejected the changes
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.flush() called outside of context")
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(f"Flush failed: {exc}")
            raise TransactionError("Failed to flush changes", exc) from exc

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """Repository bound to this unit's session, created once per unit."""
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")
        repo = self._repos.get(repo_cls)
        if repo is None:
            repo = self._repos[repo_cls] = repo_cls(self.session)
        return repo  # type: ignore[return-value]

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back
