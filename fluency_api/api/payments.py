"""Checkout: payment-intent creation and purchase completion.

POST /create-payment-intent   price -> processor client secret
POST /payments                confirmed transaction -> purchased course
GET  /payments?email=         the caller's payment history, newest first

Both POSTs need a token and share the PAYMENT_LIMIT budget.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ConfigDict, Field

from fluency_api.api.access import check_same_identity
from fluency_api.api.dependencies import get_payment_gateway, get_uow, require_user
from fluency_api.api.enrollments import PurchasedCourseOut, purchased_out
from fluency_api.api.ratelimit import PAYMENT_LIMIT, require_rate_limit
from fluency_api.api.results import WireModel
from fluency_api.core.config import SETTINGS
from fluency_api.core.metrics import PAYMENT_INTENTS
from fluency_api.models.payment import Payment
from fluency_api.models.principal import Principal
from fluency_api.repos.unit_of_work import UnitOfWork
from fluency_api.services import purchase_service
from fluency_api.services.payment_gateway import (
    PaymentGateway,
    PaymentProviderError,
    to_minor_units,
)
from fluency_api.services.purchase_service import (
    EnrollmentNotOwnedError,
    PurchaseFailed,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


class PaymentIntentIn(WireModel):
    price: Decimal = Field(gt=0)


class PaymentIntentOut(WireModel):
    client_secret: str


class PaymentIn(WireModel):
    # Older clients also send the seat count they saw; it is not trusted.
    model_config = ConfigDict(extra="ignore")

    course_id: UUID
    enrollment_id: UUID
    transaction_id: str = Field(min_length=1)
    # Free courses go through checkout with price 0.
    price: Decimal = Field(ge=0)


class PaymentOut(WireModel):
    id: str
    user_email: str
    course_id: str
    enrollment_id: str
    transaction_id: str
    price: float
    seats_before: int
    created_at: datetime


class PurchaseResult(WireModel):
    payment: PaymentOut
    purchase: PurchasedCourseOut
    available_seats: int


class PurchaseOut(WireModel):
    result: PurchaseResult


def _payment_out(p: Payment) -> PaymentOut:
    return PaymentOut(
        id=str(p.id),
        user_email=p.user_email,
        course_id=str(p.course_id),
        enrollment_id=str(p.enrollment_id),
        transaction_id=p.transaction_id,
        price=float(p.price),
        seats_before=p.seats_before,
        created_at=p.created_at,
    )


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentOut,
    dependencies=[Depends(require_rate_limit(PAYMENT_LIMIT))],
)
async def create_payment_intent(
    payload: PaymentIntentIn,
    principal: Annotated[Principal, Depends(require_user)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> PaymentIntentOut:
    amount = to_minor_units(payload.price)
    try:
        client_secret = await gateway.create_payment_intent(
            amount, SETTINGS.payment_currency
        )
    except PaymentProviderError as e:
        PAYMENT_INTENTS.labels(result="error").inc()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)
        ) from None

    PAYMENT_INTENTS.labels(result="created").inc()
    logger.info(
        "Payment intent created email=%s amount=%d gateway=%s",
        principal.email,
        amount,
        gateway.name,
    )
    return PaymentIntentOut(client_secret=client_secret)


@router.post(
    "/payments",
    response_model=PurchaseOut,
    dependencies=[Depends(require_rate_limit(PAYMENT_LIMIT))],
)
async def post_payment(
    payload: PaymentIn,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> PurchaseOut:
    try:
        receipt = await purchase_service.complete_purchase(
            uow,
            user_email=principal.email,
            course_id=payload.course_id,
            enrollment_id=payload.enrollment_id,
            transaction_id=payload.transaction_id,
            price=payload.price,
        )
    except EnrollmentNotOwnedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=e.reason
        ) from None
    except PurchaseFailed as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=e.reason
        ) from None

    return PurchaseOut(
        result=PurchaseResult(
            payment=_payment_out(receipt.payment),
            purchase=purchased_out(receipt.purchase),
            available_seats=receipt.course.available_seats,
        )
    )


@router.get("/payments", response_model=list[PaymentOut])
async def get_payments(
    email: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[UnitOfWork, Depends(get_uow)],
) -> list[PaymentOut]:
    check_same_identity(principal, email)
    return [_payment_out(p) for p in await purchase_service.list_payments(uow, email)]
