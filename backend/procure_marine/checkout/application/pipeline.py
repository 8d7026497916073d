import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from procure_marine.cart.domain.entities import Cart
from procure_marine.core.config import Settings, settings as default_settings
from procure_marine.email import config as email_config
from procure_marine.email.domain.exceptions import EmailDomainException
from procure_marine.email.domain.sender import AbstractEmailSender
from procure_marine.email.models import EmailMessage
from ..domain.entities import (
    CheckoutState,
    ContactInfo,
    DeliveryInfo,
    OrderSubmission,
    OrderSubmissionResult,
    SubmissionOutcome,
)
from ..domain.reference import ReferenceFactory, generate_order_reference
from .rendering import OrderEmailRenderer, build_order_email_subject
from .validation import validate_checkout_form

logger = logging.getLogger(__name__)

DISPATCH_FAILED_MESSAGE = "Failed to send order email. Please try again or contact us directly."
UNEXPECTED_FAILURE_MESSAGE = "An unexpected error occurred. Please try again or contact us directly."
VALIDATION_FAILED_MESSAGE = "Please correct the highlighted fields."
IN_PROGRESS_MESSAGE = "Your order is already being submitted."
ALREADY_SUBMITTED_MESSAGE = "This order has already been submitted."

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderSubmissionPipeline:
    """
    Valide le formulaire, fige le panier, génère la référence, rend l'email
    et l'envoie au service commercial.

    Machine à états: idle -> submitting -> succeeded | failed.
    Un échec se comporte comme idle pour la tentative suivante; un succès est
    définitif jusqu'à `reset()`. Aucune exception n'est propagée: chaque
    tentative retourne un OrderSubmissionResult.
    """

    def __init__(
        self,
        email_sender: AbstractEmailSender,
        renderer: Optional[OrderEmailRenderer] = None,
        settings: Optional[Settings] = None,
        reference_factory: Optional[ReferenceFactory] = None,
        clock: Optional[Clock] = None,
        sender_address: Optional[str] = None,
    ):
        self.email_sender = email_sender
        self.settings = settings or default_settings
        self.renderer = renderer or OrderEmailRenderer()
        self.reference_factory = reference_factory or self._default_reference
        self.clock = clock or utc_now
        self.sender_address = sender_address or email_config.settings.formatted_sender
        self._state = CheckoutState.IDLE

    def _default_reference(self, now: datetime) -> str:
        return generate_order_reference(now=now, prefix=self.settings.ORDER_REFERENCE_PREFIX)

    @property
    def state(self) -> CheckoutState:
        return self._state

    def reset(self) -> None:
        """Revient à l'état idle pour permettre une nouvelle commande."""
        if self._state == CheckoutState.SUBMITTING:
            logger.warning("[OrderSubmissionPipeline] reset() ignoré: envoi en cours")
            return
        self._state = CheckoutState.IDLE

    async def submit(
        self,
        contact: ContactInfo,
        delivery: DeliveryInfo,
        cart: Cart,
        additional_notes: Optional[str] = None,
    ) -> OrderSubmissionResult:
        if self._state == CheckoutState.SUBMITTING:
            logger.warning("[OrderSubmissionPipeline] Soumission refusée: un envoi est déjà en cours")
            return OrderSubmissionResult(
                success=False, outcome=SubmissionOutcome.ALREADY_IN_PROGRESS, message=IN_PROGRESS_MESSAGE
            )
        if self._state == CheckoutState.SUCCEEDED:
            logger.warning("[OrderSubmissionPipeline] Soumission refusée: commande déjà envoyée")
            return OrderSubmissionResult(
                success=False, outcome=SubmissionOutcome.ALREADY_SUBMITTED, message=ALREADY_SUBMITTED_MESSAGE
            )

        self._state = CheckoutState.SUBMITTING
        try:
            result = await self._attempt(contact, delivery, cart, additional_notes)
        except Exception as e:
            logger.error(f"[OrderSubmissionPipeline] Erreur inattendue pendant la commande: {e}", exc_info=True)
            result = OrderSubmissionResult(
                success=False, outcome=SubmissionOutcome.UNEXPECTED_FAILURE, message=UNEXPECTED_FAILURE_MESSAGE
            )

        self._state = CheckoutState.SUCCEEDED if result.success else CheckoutState.FAILED
        return result

    async def _attempt(
        self,
        contact: ContactInfo,
        delivery: DeliveryInfo,
        cart: Cart,
        additional_notes: Optional[str],
    ) -> OrderSubmissionResult:
        validation = validate_checkout_form(contact, delivery, additional_notes, cart=cart)
        if not validation.is_valid:
            logger.warning(f"[OrderSubmissionPipeline] Formulaire invalide: {sorted(validation.errors)}")
            return OrderSubmissionResult(
                success=False,
                outcome=SubmissionOutcome.VALIDATION_FAILED,
                message=VALIDATION_FAILED_MESSAGE,
                errors=validation.errors,
            )

        order = OrderSubmission.from_cart(
            cart,
            contact=validation.contact,
            delivery=validation.delivery,
            additional_notes=validation.additional_notes,
            submitted_at=self.clock(),
        )
        order_reference = self.reference_factory(order.submitted_at)
        html_body = self.renderer.render(order, order_reference)

        message = EmailMessage(
            sender=self.sender_address,
            to=[self.settings.ORDER_NOTIFICATION_EMAIL],
            subject=build_order_email_subject(order_reference),
            html_body=html_body,
            reply_to=order.contact.email,
        )

        logger.info(
            f"[OrderSubmissionPipeline] Envoi de la commande {order_reference} "
            f"({len(order.items)} ligne(s)) à {self.settings.ORDER_NOTIFICATION_EMAIL}"
        )
        try:
            send_result = await asyncio.wait_for(
                self.email_sender.send_email(message),
                timeout=self.settings.DISPATCH_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"[OrderSubmissionPipeline] Délai dépassé ({self.settings.DISPATCH_TIMEOUT_SECONDS}s) "
                f"pour la commande {order_reference}"
            )
            return self._dispatch_failed()
        except EmailDomainException as e:
            logger.error(f"[OrderSubmissionPipeline] Échec envoi commande {order_reference}: {e}", exc_info=True)
            return self._dispatch_failed()
        except Exception as e:
            # Toute erreur levée par le collaborateur d'envoi reste un échec d'envoi
            logger.error(
                f"[OrderSubmissionPipeline] Erreur du service email pour la commande {order_reference}: {e}",
                exc_info=True,
            )
            return self._dispatch_failed()

        if send_result.error or not send_result.id:
            logger.error(
                f"[OrderSubmissionPipeline] Le service email a refusé la commande {order_reference}: "
                f"{send_result.error}"
            )
            return self._dispatch_failed()

        logger.info(f"[OrderSubmissionPipeline] Commande {order_reference} envoyée (id: {send_result.id})")
        return OrderSubmissionResult(
            success=True, outcome=SubmissionOutcome.SUBMITTED, order_reference=order_reference
        )

    @staticmethod
    def _dispatch_failed() -> OrderSubmissionResult:
        return OrderSubmissionResult(
            success=False, outcome=SubmissionOutcome.DISPATCH_FAILED, message=DISPATCH_FAILED_MESSAGE
        )
