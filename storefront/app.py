import logging
import os

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .errors import install_exception_handlers
from .middleware import RequestContextMiddleware
from .routes_access import router as access_router
from .routes_checkout import router as checkout_router
from .routes_health import router as health_router
from .routes_success import router as success_router
from .routes_webhooks import router as webhooks_router


load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("storefront")


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title="Storefront", version="1.0.0")

    origins = list(settings.cors_origins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestContextMiddleware)

    install_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(access_router)
    application.include_router(checkout_router)
    application.include_router(success_router)
    application.include_router(webhooks_router)

    logger.info(
        "Storefront ready environment=%s default_product=%s",
        settings.environment,
        settings.default_product_id,
    )
    return application


app = create_app()


def main() -> None:
    settings = get_settings()
    logger.info("Listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run("storefront.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
