"""FastAPI application for khqrgen."""
from __future__ import annotations

import logging

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .config import settings
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware, route_path
from .monitoring import metrics_payload, record_service_error
from .renderer import render_qr_png
from .schemas import ErrorResponse, GenerateQRRequest, GenerateQRResponse
from .services.errors import ServiceError, err_bad_amount, err_bad_payload, err_invalid_id
from .services.generator import KHQRGenerator
from .services.store import LatestPayloadStore

app = FastAPI(title="khqrgen", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.state.latest_payloads = LatestPayloadStore()

logger = logging.getLogger("khqrgen.api")

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info(
        "khqrgen started",
        extra={"environment": settings.environment, "strict_lengths": settings.khqr_strict_lengths},
    )


def get_store(request: Request) -> LatestPayloadStore:
    return request.app.state.latest_payloads


def get_generator(store: LatestPayloadStore = Depends(get_store)) -> KHQRGenerator:
    return KHQRGenerator(store)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    path = route_path(request)
    logger.warning(
        "service error",
        extra={"code": exc.code, "path": path, "method": request.method},
    )
    record_service_error(exc.code, path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = {err["loc"][1] for err in exc.errors() if len(err["loc"]) > 1 and err["loc"][0] == "body"}
    if "amount" in fields:
        error = err_bad_amount()
    elif "id" in fields:
        error = err_invalid_id()
    else:
        error = err_bad_payload()
    return await service_error_handler(request, error)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled exception",
        extra={"path": route_path(request), "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/generate-qr", response_model=GenerateQRResponse, responses=ERROR_RESPONSES, tags=["qr"])
async def generate_qr(
    payload: GenerateQRRequest,
    generator: KHQRGenerator = Depends(get_generator),
) -> GenerateQRResponse:
    result = generator.generate(amount=payload.amount, identity=payload.id)

    return GenerateQRResponse(
        id=result.identity.value,
        qr_string=result.payload,
        md5_hash=result.md5_hash,
        amount=result.amount,
        timestamp=result.generated_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    )


@app.get("/get-latest-qr", response_class=PlainTextResponse, responses=ERROR_RESPONSES, tags=["qr"])
async def get_latest_qr(
    id: str | None = Query(default=None, description="Merchant identity ID1..ID6"),
    generator: KHQRGenerator = Depends(get_generator),
) -> PlainTextResponse:
    result = generator.latest(id)
    return PlainTextResponse(result.payload)


@app.get("/get-latest-qr/image", responses=ERROR_RESPONSES, tags=["qr"])
async def get_latest_qr_image(
    id: str | None = Query(default=None, description="Merchant identity ID1..ID6"),
    generator: KHQRGenerator = Depends(get_generator),
) -> Response:
    result = generator.latest(id)
    png = render_qr_png(result.payload, title=settings.qr_title)
    return Response(content=png, media_type="image/png")


def run() -> None:
    """Console entry point: serve the app with uvicorn."""

    configure_logging()
    logger.info("Server running", extra={"url": f"http://{settings.host}:{settings.port}"})
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
