"""PostgreSQL implementation of PaymentRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fluency_api.db.tables import PaymentRow
from fluency_api.models.payment import Payment


class PgPaymentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_by_user(self, email: str) -> list[Payment]:
        stmt = (
            select(PaymentRow)
            .where(PaymentRow.user_email == email)
            .order_by(PaymentRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Payment(
                id=r.id,
                user_email=r.user_email,
                course_id=r.course_id,
                enrollment_id=r.enrollment_id,
                transaction_id=r.transaction_id,
                price=r.price,
                seats_before=r.seats_before,
                created_at=r.created_at,
            )
            for r in rows
        ]

    async def add(self, payment: Payment) -> None:
        self._session.add(
            PaymentRow(
                id=payment.id,
                user_email=payment.user_email,
                course_id=payment.course_id,
                enrollment_id=payment.enrollment_id,
                transaction_id=payment.transaction_id,
                price=payment.price,
                seats_before=payment.seats_before,
                created_at=payment.created_at,
            )
        )
        await self._session.flush()
