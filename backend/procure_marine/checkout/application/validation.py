import re
from typing import Dict, NamedTuple, Optional

from procure_marine.cart.domain.entities import Cart
from ..domain.entities import ContactInfo, DeliveryInfo

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

REQUIRED_FIELD_MESSAGES = {
    "full_name": "Full name is required.",
    "email": "Email address is required.",
    "phone": "Phone number is required.",
    "location": "Delivery location is required.",
}
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."
EMPTY_CART_MESSAGE = "Your cart is empty. Add some products before proceeding to checkout."


def is_valid_email(email: str) -> bool:
    """Vérifie le format d'une adresse email."""
    return bool(EMAIL_PATTERN.match(email))


def _clean_optional(value: Optional[str]) -> Optional[str]:
    # Les champs optionnels vides deviennent None
    if value is None:
        return None
    value = value.strip()
    return value or None


class CheckoutFormValidation(NamedTuple):
    contact: ContactInfo
    delivery: DeliveryInfo
    additional_notes: Optional[str]
    errors: Dict[str, str]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_checkout_form(
    contact: ContactInfo,
    delivery: DeliveryInfo,
    additional_notes: Optional[str] = None,
    cart: Optional[Cart] = None,
) -> CheckoutFormValidation:
    """
    Nettoie et valide le formulaire de commande.

    Les champs obligatoires sont comparés après suppression des espaces.
    Retourne les valeurs nettoyées et un dictionnaire d'erreurs par champ
    (vide si le formulaire est valide).
    """
    errors: Dict[str, str] = {}

    if cart is not None and cart.is_empty:
        errors["cart"] = EMPTY_CART_MESSAGE

    full_name = (contact.full_name or "").strip()
    email = (contact.email or "").strip()
    phone = (contact.phone or "").strip()
    location = (delivery.location or "").strip()

    for field, value in (("full_name", full_name), ("email", email), ("phone", phone), ("location", location)):
        if not value:
            errors[field] = REQUIRED_FIELD_MESSAGES[field]

    if email and not is_valid_email(email):
        errors["email"] = INVALID_EMAIL_MESSAGE

    cleaned_contact = ContactInfo(
        full_name=full_name,
        email=email,
        phone=phone,
        company_name=_clean_optional(contact.company_name),
    )
    cleaned_delivery = DeliveryInfo(location=location, notes=_clean_optional(delivery.notes))

    return CheckoutFormValidation(
        contact=cleaned_contact,
        delivery=cleaned_delivery,
        additional_notes=_clean_optional(additional_notes),
        errors=errors,
    )
