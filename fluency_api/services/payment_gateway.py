"""Client for the external payment processor.

Only one call is needed: create a PaymentIntent and hand its client secret
to the browser, which confirms the card payment directly with the
processor.  The confirmed intent's ID later comes back to POST /payments as
``transaction_id``.

Same conditional-singleton pattern as the rate limiter: with
PAYMENT_SECRET_KEY set, StripeGateway talks to the real API over httpx;
without it (local dev, tests) FakePaymentGateway returns well-formed
secrets and never touches the network.
"""

from __future__ import annotations

import logging
import secrets
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, runtime_checkable

import httpx

from fluency_api.core.config import SETTINGS

logger = logging.getLogger(__name__)


class PaymentProviderError(Exception):
    """The processor rejected the request or could not be reached."""


def to_minor_units(price: Decimal) -> int:
    """12.34 -> 1234.  Half-up so 0.005 never silently becomes 0."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@runtime_checkable
class PaymentGateway(Protocol):
    name: str

    async def create_payment_intent(self, amount: int, currency: str) -> str: ...


class FakePaymentGateway:
    name = "fake"

    def __init__(self) -> None:
        self.created: list[tuple[int, str]] = []

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        if amount <= 0:
            raise PaymentProviderError("amount must be positive")
        self.created.append((amount, currency))
        return f"pi_fake_{secrets.token_hex(8)}_secret_{secrets.token_hex(8)}"


class StripeGateway:
    """Stripe REST API, form-encoded as Stripe expects."""

    name = "stripe"

    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._api_base = api_base
        self._timeout = timeout
        self._transport = transport

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        if amount <= 0:
            raise PaymentProviderError("amount must be positive")

        form = {
            "amount": str(amount),
            "currency": currency,
            "payment_method_types[]": "card",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._api_base,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/v1/payment_intents",
                    data=form,
                    headers={"Authorization": f"Bearer {self._secret_key}"},
                )
        except httpx.HTTPError as e:
            logger.error("Payment processor unreachable: %s", e)
            raise PaymentProviderError("payment processor unreachable") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.error(
                "Payment processor rejected intent status=%d message=%s",
                resp.status_code,
                message,
            )
            raise PaymentProviderError(message)

        client_secret = resp.json().get("client_secret")
        if not client_secret:
            raise PaymentProviderError("payment processor returned no client secret")
        return client_secret


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"payment processor error (HTTP {resp.status_code})"


if SETTINGS.payment_secret_key:
    payment_gateway: PaymentGateway = StripeGateway(
        SETTINGS.payment_secret_key, SETTINGS.payment_api_base
    )
else:
    payment_gateway = FakePaymentGateway()
