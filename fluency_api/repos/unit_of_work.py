"""Data-access context handed to every handler.

A UnitOfWork bundles the repositories a request may touch and exposes
``transaction()``: every write made inside the ``async with`` block lands
together or not at all.  Handlers receive it through ``Depends(get_uow)``
instead of reaching for a process-wide connection, which is what lets the
purchase flow be atomic and lets tests swap the store.

Two implementations, same split as the repos themselves:

  PgUnitOfWork        wraps one request-scoped AsyncSession.  The
                        transaction is a real database transaction (or a
                        SAVEPOINT when the session already has one open).

  InMemoryUnitOfWork  keeps process-wide dicts.  transaction() takes an
                        asyncio.Lock so writers run one at a time, snapshots
                        every repo on entry and restores the snapshot if the
                        block raises.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from fluency_api.repos.course_repo import CourseRepo, InMemoryCourseRepo
from fluency_api.repos.enrollment_repo import (
    EnrollmentRepo,
    InMemoryEnrollmentRepo,
    InMemoryPurchaseRepo,
    PurchaseRepo,
)
from fluency_api.repos.payment_repo import InMemoryPaymentRepo, PaymentRepo
from fluency_api.repos.pg_course_repo import PgCourseRepo
from fluency_api.repos.pg_enrollment_repo import PgEnrollmentRepo, PgPurchaseRepo
from fluency_api.repos.pg_payment_repo import PgPaymentRepo
from fluency_api.repos.pg_user_repo import PgUserRepo
from fluency_api.repos.user_repo import InMemoryUserRepo, UserRepo

logger = logging.getLogger(__name__)


class UnitOfWork(Protocol):
    users: UserRepo
    courses: CourseRepo
    enrollments: EnrollmentRepo
    purchases: PurchaseRepo
    payments: PaymentRepo

    def transaction(self) -> AbstractAsyncContextManager[None]: ...


class PgUnitOfWork:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.users = PgUserRepo(session)
        self.courses = PgCourseRepo(session)
        self.enrollments = PgEnrollmentRepo(session)
        self.purchases = PgPurchaseRepo(session)
        self.payments = PgPaymentRepo(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # A read earlier in the request autobegins a transaction; nest as a
        # SAVEPOINT then so a failure here only discards this block.
        if self._session.in_transaction():
            async with self._session.begin_nested():
                yield
        else:
            async with self._session.begin():
                yield


class InMemoryUnitOfWork:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop all data (used by tests and on startup)."""
        self.users = InMemoryUserRepo()
        self.courses = InMemoryCourseRepo()
        self.enrollments = InMemoryEnrollmentRepo()
        self.purchases = InMemoryPurchaseRepo()
        self.payments = InMemoryPaymentRepo()
        self._lock = asyncio.Lock()

    def _repos(self) -> tuple:
        return (
            self.users,
            self.courses,
            self.enrollments,
            self.purchases,
            self.payments,
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            snapshots = [(repo, repo._snapshot()) for repo in self._repos()]
            try:
                yield
            except BaseException:
                for repo, snap in snapshots:
                    repo._restore(snap)
                logger.debug("In-memory transaction rolled back")
                raise
