import logging

from fastapi import APIRouter, Response

from procure_marine.cart.interfaces.dependencies import CartSessionDep
from procure_marine.checkout.application.schemas import CheckoutRequest
from procure_marine.checkout.domain.entities import OrderSubmissionResult, SubmissionOutcome
from .dependencies import CheckoutServiceDep, release_order_pipeline

logger = logging.getLogger(__name__)

checkout_router = APIRouter(tags=["Checkout"])

OUTCOME_STATUS_CODES = {
    SubmissionOutcome.SUBMITTED: 200,
    SubmissionOutcome.VALIDATION_FAILED: 422,
    SubmissionOutcome.DISPATCH_FAILED: 502,
    SubmissionOutcome.UNEXPECTED_FAILURE: 500,
    SubmissionOutcome.ALREADY_IN_PROGRESS: 409,
    SubmissionOutcome.ALREADY_SUBMITTED: 409,
}


@checkout_router.post("", response_model=OrderSubmissionResult)
async def place_order(
    payload: CheckoutRequest,
    response: Response,
    session_id: CartSessionDep,
    checkout_service: CheckoutServiceDep,
):
    """Envoie la demande de commande; le panier de la session est vidé en cas de succès."""
    try:
        result = await checkout_service.place_order(payload)
    finally:
        release_order_pipeline(session_id)

    response.status_code = OUTCOME_STATUS_CODES[result.outcome]
    logger.info(f"API place_order: session {session_id} -> {result.outcome.value} ({response.status_code})")
    return result
