import random
from datetime import datetime, timezone
from typing import Callable, Optional

DEFAULT_REFERENCE_PREFIX = "PM"

# Signature attendue par le pipeline pour un générateur de référence injecté
ReferenceFactory = Callable[[datetime], str]


def generate_order_reference(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    prefix: str = DEFAULT_REFERENCE_PREFIX,
) -> str:
    """
    Génère une référence de commande `PM-YYYYMMDD-NNNN`.

    NNNN est un nombre pseudo-aléatoire sur 4 chiffres: l'unicité n'est pas
    garantie (10 000 valeurs par jour).
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or random
    suffix = rng.randint(0, 9999)
    return f"{prefix}-{now:%Y%m%d}-{suffix:04d}"
