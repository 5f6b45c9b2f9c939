"""FastAPI application for qrisdyn."""
from __future__ import annotations

from uuid import UUID

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .errors import QrisError
from .logging_conf import configure_logging
from .metadata import extract_metadata
from .middleware import RequestLoggingMiddleware
from .models import get_session, init_db
from .monitoring import metrics_payload, record_service_error
from .renderer import render_qr_bytes
from .schemas import (
    DynamicCodeResponse,
    DynamicQRRequest,
    DynamicQRResponse,
    MetadataRequest,
    MetadataResponse,
    RenderRequest,
    ScanRequest,
    ScanResponse,
)
from .services.generator import DynamicCodeService, default_render_options
from .services.scan import ScanService

app = FastAPI(title="qrisdyn", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("qrisdyn.api")

_MEDIA_TYPES = {"PNG": "image/png", "JPEG": "image/jpeg"}


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key uses the default value",
            extra={"config_key": "api_key"},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()
    await init_db()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


@app.exception_handler(QrisError)
async def qris_error_handler(request: Request, exc: QrisError) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.warning(
        "service error",
        extra={"code": exc.code, "detail": exc.message, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.exception(
        "unhandled exception",
        extra={"path": route_path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qris/metadata", response_model=MetadataResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def read_metadata(payload: MetadataRequest) -> MetadataResponse:
    return MetadataResponse.from_metadata(extract_metadata(payload.payload))


@app.post("/v1/qris/dynamic", response_model=DynamicQRResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def create_dynamic(
    payload: DynamicQRRequest,
    session: AsyncSession = Depends(get_session),
) -> DynamicQRResponse:
    service = DynamicCodeService(session)
    result = await service.issue(
        static_payload=payload.payload,
        amount=payload.amount,
        tax=payload.tax,
        include_image=payload.include_image,
    )
    record = result.record

    return DynamicQRResponse(
        id=UUID(record.id),
        payload=record.payload,
        crc=record.crc,
        metadata=MetadataResponse.from_metadata(result.metadata),
        qr_png_base64=result.qr_png_base64,
    )


@app.get("/v1/qris/dynamic/{code_id}", response_model=DynamicCodeResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def get_dynamic(code_id: UUID, session: AsyncSession = Depends(get_session)) -> DynamicCodeResponse:
    record = await DynamicCodeService(session).get(str(code_id))
    if not record:
        raise HTTPException(status_code=404, detail="Dynamic code not found")

    return DynamicCodeResponse(
        id=UUID(record.id),
        merchant_name=record.merchant_name,
        merchant_pan=record.merchant_pan,
        amount=record.amount,
        tax=record.tax,
        payload=record.payload,
        crc=record.crc,
        created_at=record.created_at,
    )


@app.post("/v1/qris/scan", response_model=ScanResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def scan_image(payload: ScanRequest) -> ScanResponse:
    result = ScanService().scan_base64(payload.image_base64)
    return ScanResponse(
        payload=result.payload,
        crc_valid=result.crc_valid,
        metadata=MetadataResponse.from_metadata(result.metadata),
    )


@app.post("/v1/qris/render", tags=["qris"], dependencies=[Depends(require_api_key)])
async def render_image(payload: RenderRequest) -> Response:
    options = default_render_options(
        image_format=payload.image_format,
        version=payload.version,
        error_correction=payload.error_correction,
        scale=payload.scale,
        quiet_zone=payload.quiet_zone,
        label=payload.label,
    )
    return Response(content=render_qr_bytes(payload.payload, options), media_type=_MEDIA_TYPES[options.image_format])
