"""Payment endpoints."""

from fastapi import APIRouter, status

from kaamtrack.api.dependencies import DbSession, OwnerId, Payments
from kaamtrack.api.errors import raise_for_failure
from kaamtrack.api.schemas import ErrorResponse, PaymentCreate, PaymentResponse

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def record_payment(
    db: DbSession,
    owner_id: OwnerId,
    payments: Payments,
    payload: PaymentCreate,
) -> PaymentResponse:
    """Append an advance, payment, bonus or deduction."""
    result = await payments.record_payment(
        owner_id=owner_id,
        worker_id=payload.worker_id,
        amount=payload.amount,
        payment_type=payload.payment_type,
        on_date=payload.date,
        note=payload.note,
    )
    raise_for_failure(result.failure)
    await db.commit()
    return PaymentResponse.model_validate(result.payment)
