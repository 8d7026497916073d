import logging
import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request, Response

from procure_marine.core.config import settings
from procure_marine.cart.domain.storage import AbstractKeyValueStorage
from procure_marine.cart.infrastructure.storage import FileKeyValueStorage
from procure_marine.cart.application.services import CartStore

logger = logging.getLogger(__name__)

# --- Session panier ---

def _parse_session(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return uuid.UUID(value).hex
    except ValueError:
        logger.warning(f"Cookie de session panier invalide ignoré: {value!r}")
        return None

def get_cart_session(request: Request, response: Response) -> str:
    """Identifie le client par un cookie; en émet un nouveau au premier passage."""
    session_id = _parse_session(request.cookies.get(settings.CART_SESSION_COOKIE))
    if session_id is None:
        session_id = uuid.uuid4().hex
        response.set_cookie(settings.CART_SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        logger.debug(f"Nouvelle session panier: {session_id}")
    return session_id

CartSessionDep = Annotated[str, Depends(get_cart_session)]

# --- Stockage et Store ---

def get_cart_storage(session_id: CartSessionDep) -> AbstractKeyValueStorage:
    """Un dossier de stockage par session client."""
    return FileKeyValueStorage(settings.CART_STORAGE_DIR / session_id)

CartStorageDep = Annotated[AbstractKeyValueStorage, Depends(get_cart_storage)]

def get_cart_store(storage: CartStorageDep) -> CartStore:
    return CartStore(storage=storage, storage_key=settings.CART_STORAGE_KEY)

CartStoreDep = Annotated[CartStore, Depends(get_cart_store)]
