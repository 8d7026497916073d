import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from procure_marine.core.config import settings
from procure_marine.catalog.domain.repositories import AbstractCatalogRepository
from procure_marine.catalog.infrastructure.repositories import JsonCatalogRepository
from procure_marine.catalog.application.services import CatalogService

logger = logging.getLogger(__name__)

# --- Repository du catalogue ---

@lru_cache(maxsize=1)
def get_catalog_repository() -> AbstractCatalogRepository:
    """Fournit le repository JSON, chargé une seule fois par processus."""
    logger.debug("Fourniture de JsonCatalogRepository")
    return JsonCatalogRepository(settings.CATALOG_DATA_DIR)

CatalogRepositoryDep = Annotated[AbstractCatalogRepository, Depends(get_catalog_repository)]

# --- Service du catalogue ---

def get_catalog_service(catalog_repo: CatalogRepositoryDep) -> CatalogService:
    """Injecte le repository et fournit une instance de CatalogService."""
    return CatalogService(catalog_repo=catalog_repo)

CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
