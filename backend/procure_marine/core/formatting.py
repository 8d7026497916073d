"""
Utilitaires de présentation: affichage des prix et des dates.

Ces fonctions ne font aucun calcul métier; la conversion de devise sert
uniquement à l'affichage (le panier et les emails restent dans la devise du produit).
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

TWO_PLACES = Decimal("0.01")


def format_price(amount: Decimal, currency: str = "USD") -> str:
    """
    Formate un montant pour l'affichage, ex: 1250 -> "$1,250.00".

    Les devises sans symbole connu sont préfixées par leur code ("AED 4,587.50").
    """
    quantized = Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        sign = "-" if quantized < 0 else ""
        return f"{sign}{symbol}{abs(quantized):,.2f}"
    return f"{currency.upper()} {quantized:,.2f}"


def convert_for_display(
    amount: Decimal,
    currency: str,
    display_currency: str,
    rates: Dict[Tuple[str, str], Decimal],
) -> Tuple[Decimal, str]:
    """
    Convertit un montant vers la devise d'affichage.

    Returns:
        Tuple (montant, devise). Si aucun taux n'est connu, le montant est rendu
        tel quel dans sa devise d'origine.
    """
    source = currency.upper()
    target = display_currency.upper()
    if source == target:
        return Decimal(amount), source
    rate = rates.get((source, target))
    if rate is None:
        return Decimal(amount), source
    return Decimal(amount) * Decimal(rate), target


def format_submitted_at(moment: Optional[datetime]) -> str:
    """Date lisible pour l'email de commande, ex: "Friday, March 15, 2024 at 10:30 AM UTC"."""
    if moment is None:
        return "N/A"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.strftime("%A, %B %d, %Y at %I:%M %p %Z").strip()
