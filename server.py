import logging
import traceback
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from exceptions.base import CheckoutException
from jobs.order_sweep_job import OrderSweepJob
from processing.processing import processing_router
from repositories.order import OrderRepository
from services.notification import NotificationDispatcher, DiscordWebhookSink, TelegramAdminSink
from services.order import OrderService
from services.payment_gateway import PaygateClient
from services.payment_verifier import CallbackVerifier
from services.token_issuer import build_token_issuer
from utils.config_validator import validate_or_exit
from utils.html_escape import safe_html
from web.admin_router import admin_router
from web.api_router import api_router, MALFORMED_BODY_DETAILS

# Telegram rejects longer messages
MAX_ALERT_LENGTH = 4096


def build_notification_dispatcher() -> NotificationDispatcher:
    sinks = []
    if config.DISCORD_WEBHOOK_URL:
        sinks.append(DiscordWebhookSink(config.DISCORD_WEBHOOK_URL, timeout_seconds=config.GATEWAY_TIMEOUT_SECONDS))
    if config.TOKEN and config.ADMIN_ID_LIST:
        sinks.append(TelegramAdminSink(config.TOKEN, config.ADMIN_ID_LIST))
    logging.info(f"[Init] Notification sinks: {[sink.name for sink in sinks] or 'none'}")
    return NotificationDispatcher(sinks)


def build_order_service(dispatcher: NotificationDispatcher) -> OrderService:
    repository = OrderRepository()
    gateway = PaygateClient()
    verifier = CallbackVerifier(repository, gateway, dispatcher)
    return OrderService(
        repository=repository,
        token_issuer=build_token_issuer(config.ORDER_TOKEN_SECRET),
        gateway=gateway,
        verifier=verifier
    )


def create_app(
    order_service: OrderService | None = None,
    dispatcher: NotificationDispatcher | None = None,
    storefront_success_url: str = config.STOREFRONT_SUCCESS_URL,
    admin_secret_key: str = config.ADMIN_SECRET_KEY,
    cors_allowed_origins: list[str] = config.CORS_ALLOWED_ORIGINS,
    sweep_interval_seconds: int = config.ORDER_SWEEP_INTERVAL_SECONDS
) -> FastAPI:
    """
    Build the FastAPI application.

    Services can be injected (tests); otherwise they are wired from config.
    """
    if dispatcher is None:
        dispatcher = order_service.verifier.dispatcher if order_service else build_notification_dispatcher()
    if order_service is None:
        order_service = build_order_service(dispatcher)
    sweep_job = OrderSweepJob(order_service, check_interval_seconds=sweep_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler for startup and shutdown."""
        await sweep_job.start()
        logging.info("[Startup] Order sweep job started")

        yield

        logging.warning('Shutting down..')
        await sweep_job.stop()
        await dispatcher.close()
        logging.warning('Bye!')

    app = FastAPI(lifespan=lifespan)
    app.state.order_service = order_service
    app.state.notification_dispatcher = dispatcher
    app.state.sweep_job = sweep_job
    app.state.storefront_success_url = storefront_success_url
    app.state.admin_secret_key = admin_secret_key

    if cors_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type", "Authorization", "X-Admin-Key"],
        )
        logging.info(f"[Startup] CORS middleware enabled for origins: {cors_allowed_origins}")
    else:
        logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

    app.include_router(api_router)
    app.include_router(admin_router)
    app.include_router(processing_router)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Field locations only, the rejected values may carry customer data
        locations = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        logging.warning(f"Malformed request on {request.url.path}: {locations}")
        detail = MALFORMED_BODY_DETAILS.get(request.url.path, "Malformed request")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})

    @app.exception_handler(CheckoutException)
    async def checkout_exception_handler(request: Request, exc: CheckoutException):
        logging.warning(f"Unmapped {exc!r} on {request.url.path}")
        return JSONResponse(status_code=exc.http_status, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def exception_handler(request: Request, exc: Exception):
        logging.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
        traceback_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        admin_notification = (
            f"Critical error caused by {safe_html(exc)}\n\n"
            f"Stack trace:\n{safe_html(traceback_str)}"
        )
        await dispatcher.alert_admins(admin_notification[:MAX_ALERT_LENGTH])
        return JSONResponse(status_code=500, content={"message": "An internal error occurred"})

    return app


def main() -> None:
    validate_or_exit(config)
    # log_config=None keeps uvicorn on the root handlers set up by setup_logging()
    uvicorn.run(create_app(), host=config.WEBAPP_HOST, port=config.WEBAPP_PORT, log_config=None)
