"""
Traduction des exceptions de domaine en réponses HTTP JSON `{"detail": message}`.

Les services et repositories lèvent leurs propres exceptions; seul ce module
connaît les codes HTTP correspondants.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from procure_marine.cart.domain.exceptions import (
    CartDomainException, InvalidQuantityException, ProductNotPurchasableException
)
from procure_marine.catalog.domain.exceptions import (
    CatalogDataException, CatalogDomainException, CategoryNotFoundException, ProductNotFoundException
)
from procure_marine.email.domain.exceptions import EmailConfigurationException

logger = logging.getLogger(__name__)


def _status_for_catalog(exc: CatalogDomainException) -> int:
    if isinstance(exc, (ProductNotFoundException, CategoryNotFoundException)):
        return 404
    return 500


def _status_for_cart(exc: CartDomainException) -> int:
    if isinstance(exc, InvalidQuantityException):
        return 400
    if isinstance(exc, ProductNotPurchasableException):
        return 409
    return 500


async def catalog_exception_handler(request: Request, exc: CatalogDomainException) -> JSONResponse:
    status_code = _status_for_catalog(exc)
    if isinstance(exc, CatalogDataException):
        logger.error(f"Données du catalogue indisponibles ({request.url.path}): {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def cart_exception_handler(request: Request, exc: CartDomainException) -> JSONResponse:
    status_code = _status_for_cart(exc)
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def email_configuration_exception_handler(request: Request, exc: EmailConfigurationException) -> JSONResponse:
    logger.error(f"Service email non configuré ({request.url.path}): {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Order submission is temporarily unavailable. Please contact us directly."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogDomainException, catalog_exception_handler)
    app.add_exception_handler(CartDomainException, cart_exception_handler)
    app.add_exception_handler(EmailConfigurationException, email_configuration_exception_handler)
