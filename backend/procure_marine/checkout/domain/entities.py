from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from procure_marine.cart.domain.entities import Cart, CartItem

# Entités du domaine "Checkout"
# Une commande n'est jamais persistée: elle est composée puis envoyée par email.


class CheckoutModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ContactInfo(CheckoutModel):
    full_name: str
    email: str
    phone: str
    company_name: Optional[str] = None


class DeliveryInfo(CheckoutModel):
    location: str
    notes: Optional[str] = None


class OrderSubmission(CheckoutModel):
    """Copie figée du panier et du formulaire au moment de l'envoi."""
    items: Tuple[CartItem, ...]
    contact: ContactInfo
    delivery: DeliveryInfo
    additional_notes: Optional[str] = None
    submitted_at: datetime

    @classmethod
    def from_cart(
        cls,
        cart: Cart,
        contact: ContactInfo,
        delivery: DeliveryInfo,
        submitted_at: datetime,
        additional_notes: Optional[str] = None,
    ) -> "OrderSubmission":
        return cls(
            items=tuple(cart.items),
            contact=contact,
            delivery=delivery,
            additional_notes=additional_notes,
            submitted_at=submitted_at,
        )

    @computed_field
    @property
    def subtotal(self) -> Decimal:
        return Cart(items=self.items).total_price

    @computed_field
    @property
    def quote_items_count(self) -> int:
        return Cart(items=self.items).quote_items_count


class CheckoutState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionOutcome(str, Enum):
    SUBMITTED = "submitted"
    VALIDATION_FAILED = "validation_failed"
    DISPATCH_FAILED = "dispatch_failed"
    UNEXPECTED_FAILURE = "unexpected_failure"
    ALREADY_IN_PROGRESS = "already_in_progress"
    ALREADY_SUBMITTED = "already_submitted"


class OrderSubmissionResult(CheckoutModel):
    """Résultat structuré d'une tentative de commande; les échecs ne sont jamais levés."""
    success: bool
    outcome: SubmissionOutcome
    order_reference: Optional[str] = None
    message: Optional[str] = None
    errors: Dict[str, str] = Field(default_factory=dict)
