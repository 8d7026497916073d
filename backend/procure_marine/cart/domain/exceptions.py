"""Exceptions spécifiques au domaine Cart."""


class CartDomainException(Exception):
    """Classe de base pour les exceptions du domaine Cart."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidQuantityException(CartDomainException):
    """Levée lorsqu'une quantité ajoutée n'est pas un entier strictement positif."""
    def __init__(self, quantity):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}.")
        self.quantity = quantity


class ProductNotPurchasableException(CartDomainException):
    """Levée par la couche API lorsqu'on tente d'ajouter un produit en rupture."""
    def __init__(self, product_id: str):
        super().__init__(f"Product '{product_id}' is out of stock and cannot be added to the cart.")
        self.product_id = product_id


class StorageException(CartDomainException):
    """Levée par un backend de stockage clé/valeur en cas d'erreur d'E/S."""
    def __init__(self, message: str, original_exception: Exception = None):
        full_message = f"Cart storage error: {message}"
        if original_exception:
            full_message += f" ({original_exception})"
        super().__init__(full_message)
        self.original_exception = original_exception
