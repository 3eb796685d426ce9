from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from weekmenu.api.routes import menu
from weekmenu.infra.KV_Store import build_store
from weekmenu.logic.menu.store_service import MenuStoreService
from weekmenu.logic.menu.week import default_clock
from weekmenu.utilities.config import get_settings
from weekmenu.utilities.constants import FETCH_FAILED_MESSAGE, INVALID_MENU_MESSAGE, SAVE_FAILED_MESSAGE
from weekmenu.utilities.exceptions import InvalidMenuShape, StorageUnavailable

# Logging
logger = logging.getLogger("weekmenu_app")


def _failure_message(request: Request) -> str:
    return FETCH_FAILED_MESSAGE if request.method == "GET" else SAVE_FAILED_MESSAGE


# -------------------- Error handlers --------------------
async def invalid_menu_handler(request: Request, exc: InvalidMenuShape):
    logger.info("Rejected menu document: %s", exc.details)
    return JSONResponse(status_code=400, content={"error": INVALID_MENU_MESSAGE})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Undecodable JSON bodies end up here instead of reaching the service
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": INVALID_MENU_MESSAGE})


async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    logger.error("Storage unavailable during %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content={"error": _failure_message(request)})


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": _failure_message(request)})


def create_app(service: Optional[MenuStoreService] = None) -> FastAPI:
    """Build the API around a menu service (one backed by the configured store by default)."""
    if service is None:
        settings = get_settings()
        service = MenuStoreService(build_store(settings), key=settings.menu_key,
                                   clock=default_clock(settings.timezone))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Menu service ready (key=%s, store=%s)", service.key, type(service.store).__name__)
        yield
        service.store.close()

    # no debug flag: in debug mode Starlette answers 500s with a traceback page
    app = FastAPI(title="Weekly Menu API", lifespan=lifespan)
    app.state.menu_service = service

    app.add_exception_handler(InvalidMenuShape, invalid_menu_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StorageUnavailable, storage_unavailable_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(menu.router)
    app.include_router(menu.router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


# Initialize FastAPI app
app = create_app()
