"""
Module principal de l'application FastAPI Procure Marine.

Configure le logging et CORS, enregistre les gestionnaires d'exceptions de
domaine et inclut les routeurs catalogue, panier et commande.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from procure_marine.core.config import settings
from procure_marine.core.exception_handlers import register_exception_handlers
from procure_marine.catalog.interfaces.api import catalog_router
from procure_marine.cart.interfaces.api import cart_router
from procure_marine.checkout.interfaces.api import checkout_router

# Configurer le logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="API du catalogue, du panier et des demandes de commande Procure Marine.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(catalog_router, prefix=f"{settings.API_V1_PREFIX}/catalog")
app.include_router(cart_router, prefix=f"{settings.API_V1_PREFIX}/cart")
app.include_router(checkout_router, prefix=f"{settings.API_V1_PREFIX}/checkout")


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


logger.info(f"[main] {settings.APP_NAME} démarrée (API sous {settings.API_V1_PREFIX})")


if __name__ == "__main__":
    import uvicorn
    logger.info("Démarrage du serveur Uvicorn pour le développement...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
