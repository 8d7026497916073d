import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import jinja2

from procure_marine.cart.domain.entities import Cart
from procure_marine.catalog.domain.entities import FixedPrice
from procure_marine.core.formatting import format_price, format_submitted_at
from ..domain.entities import OrderSubmission
from ..domain.exceptions import OrderRenderingException

logger = logging.getLogger(__name__)

# Dossier des templates, livré avec le package
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
ORDER_EMAIL_TEMPLATE = "order_request_email.html"

PRICE_ON_REQUEST_LABEL = "Price on Request"


def build_order_email_subject(order_reference: str) -> str:
    return f"New Order Request - {order_reference}"


def _build_environment(template_dir: Path) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(template_dir)),
        autoescape=jinja2.select_autoescape(["html", "xml"]),
        undefined=jinja2.StrictUndefined,
    )
    env.filters["price"] = format_price
    env.filters["submitted_at"] = format_submitted_at
    return env


class OrderEmailRenderer:
    """Génère le contenu HTML de l'email de demande de commande."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir or TEMPLATE_DIR
        self.env = _build_environment(self.template_dir)

    def _item_rows(self, order: OrderSubmission) -> List[Dict[str, Any]]:
        rows = []
        for item in order.items:
            price = item.product.price
            if isinstance(price, FixedPrice):
                unit_price = format_price(price.amount, price.currency)
                line_total = format_price(price.amount * item.quantity, price.currency)
            else:
                unit_price = PRICE_ON_REQUEST_LABEL
                line_total = PRICE_ON_REQUEST_LABEL
            rows.append({
                "name": item.product.name,
                "part_number": item.product.part_number,
                "quantity": item.quantity,
                "unit_price": unit_price,
                "line_total": line_total,
            })
        return rows

    def build_context(self, order: OrderSubmission, order_reference: str) -> Dict[str, Any]:
        has_fixed_items = any(isinstance(item.product.price, FixedPrice) for item in order.items)
        return {
            "order_reference": order_reference,
            "subject": build_order_email_subject(order_reference),
            "contact": order.contact,
            "delivery": order.delivery,
            "additional_notes": order.additional_notes,
            "items": self._item_rows(order),
            "has_fixed_items": has_fixed_items,
            # Un sous-total par devise: les montants de devises différentes ne sont jamais additionnés
            "subtotals": list(Cart(items=order.items).totals_by_currency().items()),
            "quote_items_count": order.quote_items_count,
            "submitted_at": order.submitted_at,
        }

    def render(self, order: OrderSubmission, order_reference: str) -> str:
        """
        Rend le template de commande.

        Raises:
            OrderRenderingException: Si le template est introuvable ou invalide.
        """
        context = self.build_context(order, order_reference)
        try:
            template = self.env.get_template(ORDER_EMAIL_TEMPLATE)
            html = template.render(context)
        except jinja2.TemplateError as e:
            logger.error(f"[OrderEmailRenderer] Erreur rendu template {ORDER_EMAIL_TEMPLATE}: {e}", exc_info=True)
            raise OrderRenderingException(ORDER_EMAIL_TEMPLATE, e) from e
        logger.debug(f"[OrderEmailRenderer] Email rendu pour la commande {order_reference}")
        return html
