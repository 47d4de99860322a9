import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import Settings, settings as default_settings
from core.exceptions import (
    CoffeeShopError,
    ConflictError,
    InsufficientInventory,
    NotFoundError,
    OrderAlreadyClosed,
    TransactionFailure,
    ValidationError,
)
from core.logging import configure_logging
from db.database import build_engine, build_session_maker, create_db_and_tables
from routers.inventory import router as inventory_router
from routers.menu import router as menu_router
from routers.orders import router as orders_router
from routers.reports import router as reports_router

logger = logging.getLogger(__name__)

# Most specific first; the first matching family wins.
ERROR_STATUS = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (OrderAlreadyClosed, status.HTTP_409_CONFLICT),
    (InsufficientInventory, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (TransactionFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


async def coffee_shop_error_handler(request: Request, exc: CoffeeShopError) -> JSONResponse:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for family, family_code in ERROR_STATUS:
        if isinstance(exc, family):
            code = family_code
            break
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=code, content={"detail": "internal error, please retry"})
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables(app.state.engine)
    yield
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Coffee Shop API",
        description="API for managing a coffee shop's menu, inventory and orders",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url, echo=settings.database_echo)
    app.state.session_maker = build_session_maker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CoffeeShopError, coffee_shop_error_handler)

    app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
    app.include_router(menu_router, prefix="/menu", tags=["menu"])
    app.include_router(orders_router, prefix="/orders", tags=["orders"])
    app.include_router(reports_router, prefix="/reports", tags=["reports"])
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
