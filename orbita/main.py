"""
Orbita Secrets - encrypted credential storage and GitHub OAuth connect flow.

Features:
- AES-256-GCM encryption of stored secrets
- Signed, expiring OAuth state tokens
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from .config import get_settings
from .logging import setup_logging, get_logger
from .api.router import router
from .dependencies import SERVICE_NAME, VERSION, get_cipher, get_metrics, get_state_signer
from .middleware.correlation import CorrelationIdMiddleware
from .middleware.error_handler import ErrorHandlerMiddleware
from .middleware.metrics import MetricsMiddleware
from .middleware.validation import ValidationMiddleware
from .health import HealthChecker

settings = get_settings()

setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME)
logger = get_logger()

metrics = get_metrics()

health_checker = HealthChecker(
    cipher_provider=get_cipher,
    signer_provider=get_state_signer,
    service_name=SERVICE_NAME,
    version=VERSION,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    readiness = health_checker.readiness()
    logger.info(
        "service_starting",
        version=VERSION,
        env=settings.ENV,
        secrets_configured=readiness["status"] == "ready",
    )
    yield
    logger.info("service_stopping")
    metrics.app_up.labels(service=SERVICE_NAME, version=VERSION).set(0)


app = FastAPI(
    title="Orbita Secrets",
    version=VERSION,
    description="Encrypted secret storage and OAuth state handling for Orbita",
    lifespan=lifespan,
)

# Starlette runs the last added middleware first: correlation ID wraps everything
app.add_middleware(ValidationMiddleware)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(MetricsMiddleware, metrics=metrics)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(router)

metrics_app = make_asgi_app(registry=metrics.registry)
app.mount("/metrics", metrics_app)


@app.get("/health")
async def health():
    """
    Liveness probe - basic health check.

    Returns 200 if service is running.
    """
    logger.debug("health_check_liveness")
    return health_checker.liveness()


@app.get("/health/ready")
async def health_ready():
    """
    Readiness probe.

    Returns:
        200: Encryption key and state secret are configured
        503: Service is not ready
    """
    logger.debug("health_check_readiness")
    result = health_checker.readiness()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(content=result, status_code=status_code)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "orbita.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=True,
    )
