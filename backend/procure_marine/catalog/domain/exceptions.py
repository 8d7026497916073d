"""Exceptions spécifiques au domaine Catalog."""


class CatalogDomainException(Exception):
    """Classe de base pour les exceptions du domaine Catalog."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ProductNotFoundException(CatalogDomainException):
    """Levée lorsqu'un produit demandé (slug ou ID) n'existe pas."""
    def __init__(self, slug: str = None, product_id: str = None):
        if slug:
            super().__init__(f"Product '{slug}' not found.")
        else:
            super().__init__(f"Product with ID '{product_id}' not found.")
        self.slug = slug
        self.product_id = product_id


class CategoryNotFoundException(CatalogDomainException):
    """Levée lorsqu'une catégorie demandée n'existe pas."""
    def __init__(self, slug: str):
        super().__init__(f"Category '{slug}' not found.")
        self.slug = slug


class CatalogDataException(CatalogDomainException):
    """Levée si les fichiers de données du catalogue sont absents ou invalides."""
    pass
