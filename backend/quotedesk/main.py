import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quotedesk.config import Settings, get_settings
from quotedesk.errors import ErrorKind, QuoteDeskError
from quotedesk.routers import notifications, search
from quotedesk.services.amadeus_client import AmadeusClient
from quotedesk.services.flight_search import FlightSearchService
from quotedesk.services.hotel_search import HotelSearchService
from quotedesk.services.mailer import Mailer
from quotedesk.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Données de la requête invalides"


def configure_logging(settings: Settings) -> None:
    """Console + rotating file logging."""
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(),
            RotatingFileHandler(
                log_dir / "quotedesk.log",
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            ),
        ],
    )

    # Quiet noisy libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def create_app(
    settings: Settings | None = None,
    *,
    amadeus_transport: httpx.AsyncBaseTransport | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    """Build the API. Missing or blank credentials fail here, at process start."""
    cfg = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(cfg)

        amadeus = AmadeusClient.from_settings(cfg, transport=amadeus_transport)
        app.state.settings = cfg
        app.state.flight_search = FlightSearchService(
            amadeus,
            display_fee=cfg.display_fee,
            fee_currency=cfg.display_fee_currency,
            default_results=cfg.flight_default_results,
            max_results=cfg.flight_max_results,
        )
        app.state.hotel_search = HotelSearchService(amadeus)
        app.state.dispatcher = NotificationDispatcher.from_settings(cfg, mailer=mailer)
        logger.info("QuoteDesk started")

        yield

        await amadeus.close()
        logger.info("QuoteDesk stopped")

    app = FastAPI(
        title="QuoteDesk",
        description="Travel agency lead capture and Amadeus search proxy",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(QuoteDeskError)
    async def quotedesk_error_handler(request: Request, exc: QuoteDeskError):
        if exc.detail:
            logger.warning(f"{request.url.path} failed ({exc.kind.value}): {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message, "kind": exc.kind.value},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.url.path} rejected: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": INVALID_BODY_MESSAGE,
                "kind": ErrorKind.INVALID_REQUEST.value,
            },
        )

    app.include_router(search.router, prefix="/api/amadeus", tags=["search"])
    app.include_router(notifications.router, prefix="/api", tags=["notifications"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "service": "quotedesk"}

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("quotedesk.main:create_app", factory=True, host="0.0.0.0", port=8000)
