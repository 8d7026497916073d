import logging

from procure_marine.cart.application.services import CartStore
from ..domain.entities import OrderSubmissionResult
from .pipeline import OrderSubmissionPipeline
from .schemas import CheckoutRequest

logger = logging.getLogger(__name__)


class CheckoutService:
    """Relie le panier et le pipeline: le panier n'est vidé qu'après un envoi confirmé."""

    def __init__(self, cart_store: CartStore, pipeline: OrderSubmissionPipeline):
        self.cart_store = cart_store
        self.pipeline = pipeline

    async def place_order(self, request: CheckoutRequest) -> OrderSubmissionResult:
        cart = self.cart_store.load()
        logger.info(f"[CheckoutService] Commande demandée pour un panier de {cart.total_items} article(s)")

        result = await self.pipeline.submit(
            contact=request.contact.to_domain(),
            delivery=request.delivery.to_domain(),
            cart=cart,
            additional_notes=request.additional_notes,
        )

        if result.success:
            self.cart_store.clear()
            logger.info(f"[CheckoutService] Commande {result.order_reference} confirmée, panier vidé")
        else:
            logger.info(f"[CheckoutService] Commande non envoyée ({result.outcome.value}), panier conservé")
        return result
