import logging
from functools import lru_cache
from typing import Annotated, Dict

from fastapi import Depends

from procure_marine.cart.interfaces.dependencies import CartSessionDep, CartStoreDep
from procure_marine.email.interfaces.dependencies import EmailSenderDep
from procure_marine.checkout.application.pipeline import OrderSubmissionPipeline
from procure_marine.checkout.application.rendering import OrderEmailRenderer
from procure_marine.checkout.application.services import CheckoutService
from procure_marine.checkout.domain.entities import CheckoutState

logger = logging.getLogger(__name__)

# --- Renderer (templates chargés une fois) ---

@lru_cache(maxsize=1)
def get_order_email_renderer() -> OrderEmailRenderer:
    return OrderEmailRenderer()

OrderEmailRendererDep = Annotated[OrderEmailRenderer, Depends(get_order_email_renderer)]

# --- Pipeline par session ---
# Un pipeline est partagé par les requêtes concurrentes d'une même session
# tant qu'un envoi est en cours; il est libéré ensuite.

_active_pipelines: Dict[str, OrderSubmissionPipeline] = {}

def get_order_pipeline(
    session_id: CartSessionDep,
    email_sender: EmailSenderDep,
    renderer: OrderEmailRendererDep,
) -> OrderSubmissionPipeline:
    pipeline = _active_pipelines.get(session_id)
    if pipeline is None:
        pipeline = OrderSubmissionPipeline(email_sender=email_sender, renderer=renderer)
        _active_pipelines[session_id] = pipeline
    return pipeline

def release_order_pipeline(session_id: str) -> None:
    pipeline = _active_pipelines.get(session_id)
    if pipeline is not None and pipeline.state != CheckoutState.SUBMITTING:
        del _active_pipelines[session_id]
        logger.debug(f"Pipeline de commande libéré pour la session {session_id}")

OrderPipelineDep = Annotated[OrderSubmissionPipeline, Depends(get_order_pipeline)]

# --- Service checkout ---

def get_checkout_service(cart_store: CartStoreDep, pipeline: OrderPipelineDep) -> CheckoutService:
    return CheckoutService(cart_store=cart_store, pipeline=pipeline)

CheckoutServiceDep = Annotated[CheckoutService, Depends(get_checkout_service)]
