import json
import logging
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from procure_marine.catalog.domain.entities import Product
from ..domain.entities import Cart, CartItem, PersistedCart
from ..domain.exceptions import InvalidQuantityException, StorageException
from ..domain.storage import AbstractKeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_CART_STORAGE_KEY = "procure-marine-cart"

CartListener = Callable[[Cart], None]


def _ensure_integer(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityException(quantity)


def _merge_duplicates(items: Tuple[CartItem, ...]) -> Tuple[CartItem, ...]:
    """Fusionne les lignes d'un même produit: quantités additionnées, premier instantané conservé."""
    merged: Dict[str, CartItem] = {}
    for item in items:
        existing = merged.get(item.product.id)
        if existing is None:
            merged[item.product.id] = item
        else:
            logger.warning(f"[CartStore] Ligne en double pour {item.product.id} dans le panier stocké, fusion")
            merged[item.product.id] = CartItem(product=existing.product, quantity=existing.quantity + item.quantity)
    return tuple(merged.values())


class CartStore:
    """
    Source de vérité du panier, persistée dans un stockage clé/valeur.

    Chaque mutation relit l'état persisté le plus récent, applique l'opération,
    réécrit puis notifie les abonnés. L'état en mémoire n'est jamais modifié
    directement, ce qui évite de perdre une mise à jour faite par un autre
    CartStore partageant le même stockage.

    Les abonnés (`subscribe`) ne voient que les changements effectués via
    cette instance.
    """

    def __init__(self, storage: AbstractKeyValueStorage, storage_key: str = DEFAULT_CART_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self._current = Cart()
        self._hydrated = False
        self._listeners: List[CartListener] = []

    # --- État courant et abonnements ---

    @property
    def current(self) -> Cart:
        """Dernier panier connu (vide tant que `load()` n'a pas été appelé)."""
        return self._current

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Enregistre un abonné et retourne la fonction de désabonnement."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, cart: Cart) -> Cart:
        self._current = cart
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception as e:
                # Un abonné défaillant ne doit pas bloquer les autres
                logger.error(f"[CartStore] Erreur dans un abonné du panier: {e}", exc_info=True)
        return cart

    # --- Lecture / écriture du stockage ---

    def _read(self) -> Cart:
        try:
            raw = self.storage.read(self.storage_key)
        except StorageException as e:
            logger.warning(f"[CartStore] Stockage illisible, panier vide utilisé: {e}")
            return Cart()

        if not raw:
            return Cart()

        try:
            persisted = PersistedCart.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"[CartStore] Panier stocké corrompu sous '{self.storage_key}', réinitialisation: {e}")
            return Cart()

        # Les totaux sont toujours recalculés à partir des items
        return Cart(items=_merge_duplicates(persisted.items))

    def _save(self, cart: Cart) -> None:
        try:
            self.storage.write(self.storage_key, cart.model_dump_json(by_alias=True))
        except StorageException as e:
            logger.error(f"[CartStore] Échec de sauvegarde du panier '{self.storage_key}': {e}")

    def _mutate(self, change: Callable[[Cart], Cart]) -> Cart:
        # Relecture, modification et écriture sous le verrou de la clé
        with self.storage.lock(self.storage_key):
            cart = change(self._read())
            self._save(cart)
        self._hydrated = True
        return self._publish(cart)

    # --- Opérations ---

    def load(self) -> Cart:
        """Relit le panier persisté (vide si absent ou illisible)."""
        cart = self._read()
        self._hydrated = True
        logger.debug(f"[CartStore] Panier chargé: {cart.total_items} article(s)")
        return self._publish(cart)

    def add(self, product: Product, quantity: int = 1) -> Cart:
        """Ajoute un produit; s'il est déjà présent, sa quantité est incrémentée."""
        _ensure_integer(quantity)
        if quantity < 1:
            raise InvalidQuantityException(quantity)

        def change(cart: Cart) -> Cart:
            items = list(cart.items)
            for index, item in enumerate(items):
                if item.product.id == product.id:
                    items[index] = CartItem(product=item.product, quantity=item.quantity + quantity)
                    break
            else:
                items.append(CartItem(product=product, quantity=quantity))
            return Cart(items=tuple(items))

        logger.info(f"[CartStore] Ajout de {quantity} x {product.id} au panier")
        return self._mutate(change)

    def remove(self, product_id: str) -> Cart:
        """Retire un produit du panier (sans effet s'il est absent)."""
        def change(cart: Cart) -> Cart:
            items = tuple(item for item in cart.items if item.product.id != product_id)
            if len(items) != len(cart.items):
                logger.info(f"[CartStore] Produit {product_id} retiré du panier")
            return Cart(items=items)

        return self._mutate(change)

    def set_quantity(self, product_id: str, quantity: int) -> Cart:
        """Fixe la quantité exacte; une quantité < 1 équivaut à `remove`."""
        _ensure_integer(quantity)
        if quantity < 1:
            return self.remove(product_id)

        def change(cart: Cart) -> Cart:
            return Cart(items=tuple(
                CartItem(product=item.product, quantity=quantity) if item.product.id == product_id else item
                for item in cart.items
            ))

        logger.info(f"[CartStore] Quantité de {product_id} fixée à {quantity}")
        return self._mutate(change)

    def clear(self) -> Cart:
        logger.info(f"[CartStore] Panier '{self.storage_key}' vidé")
        return self._mutate(lambda _: Cart())

    def contains(self, product_id: str) -> bool:
        return self._read().find(product_id) is not None

    def quantity_of(self, product_id: str) -> int:
        item: Optional[CartItem] = self._read().find(product_id)
        return item.quantity if item else 0
