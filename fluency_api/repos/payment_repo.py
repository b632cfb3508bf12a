from __future__ import annotations

from typing import Protocol

from fluency_api.models.payment import Payment


class PaymentRepo(Protocol):
    async def list_by_user(self, email: str) -> list[Payment]: ...
    async def add(self, payment: Payment) -> None: ...


class InMemoryPaymentRepo:
    def __init__(self) -> None:
        self._items: list[Payment] = []

    def _snapshot(self) -> list[Payment]:
        return list(self._items)

    def _restore(self, snapshot: list[Payment]) -> None:
        self._items = snapshot

    async def list_by_user(self, email: str) -> list[Payment]:
        # newest first
        return sorted(
            (p for p in self._items if p.user_email == email),
            key=lambda p: p.created_at,
            reverse=True,
        )

    async def add(self, payment: Payment) -> None:
        self._items.append(payment)
