import uuid
from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from synesthesia.config.logger import bind_request_context, get_logger
from synesthesia.services.dependencies import DownloaderDep, FileManagerDep, SeparationServiceDep
from synesthesia.services.downloader import AudioDownloader
from synesthesia.services.file_manager import FileManager
from synesthesia.services.orchestrator import StemSeparationService
from synesthesia.utils.exceptions import (
    DownloadFailedError,
    PayloadTooLargeError,
    ServiceUnavailableError,
    ValidationError,
)
from synesthesia.utils.validation import validate_media_url

logger = get_logger(__name__)


class StemsResponse(BaseModel):
    drums: Optional[str] = None
    bass: Optional[str] = None
    vocals: Optional[str] = None
    guitar: Optional[str] = None
    piano: Optional[str] = None


class SeparationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    is_demo: bool = Field(False, alias="isDemo")
    stems: StemsResponse


class SeparationUrlRequest(BaseModel):
    url: Optional[str] = None


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    has_key: bool = Field(alias="hasKey")
    key_length: int = Field(alias="keyLength")
    workflow: str


def _require(service, name: str):
    if service is None:
        raise ServiceUnavailableError(f"{name} is not initialized")
    return service


def register_error_handlers(app: FastAPI):
    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        bind_request_context(request_id=request_id, path=request.url.path)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large_handler(_: Request, exc: PayloadTooLargeError):
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"error": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(_: Request, exc: ValidationError):
        logger.warning("Rejected request", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(ServiceUnavailableError)
    async def service_unavailable_handler(_: Request, exc: ServiceUnavailableError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": str(exc)},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Request, exc: ValueError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(_: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(err.get("loc", [])), "msg": err.get("msg", "")} for err in exc.errors()]


def register_routes(app: FastAPI, config):
    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        credentials = config.credentials
        return HealthResponse(
            status="ok",
            has_key=credentials.has_key,
            key_length=len(credentials.api_key),
            workflow=credentials.workflow_id,
        )

    @app.post("/separate", response_model=SeparationResponse)
    async def separate_upload(
        audio: Optional[UploadFile] = File(None),
        separation_service: Optional[StemSeparationService] = SeparationServiceDep,
        file_manager: Optional[FileManager] = FileManagerDep,
    ):
        if audio is None or not audio.filename:
            raise ValidationError("No audio file uploaded (expected form field 'audio')")

        service = _require(separation_service, "Separation service")
        files = _require(file_manager, "File manager")

        logger.info("Receiving upload", filename=audio.filename, content_type=audio.content_type)
        try:
            local_path = await run_in_threadpool(files.save_upload, audio.file, audio.filename)
        finally:
            await audio.close()

        result = await service.separate(local_path)
        return result.to_payload()

    @app.post("/separate-url", response_model=SeparationResponse)
    async def separate_from_url(
        body: SeparationUrlRequest,
        separation_service: Optional[StemSeparationService] = SeparationServiceDep,
        downloader: Optional[AudioDownloader] = DownloaderDep,
    ):
        url = validate_media_url(body.url)
        service = _require(separation_service, "Separation service")
        media_downloader = _require(downloader, "Downloader")

        try:
            local_path = await media_downloader.download(url)
        except DownloadFailedError as e:
            logger.warning("Media download failed", url=url, error=str(e))
            return service.fallback.payload(e.reason).to_payload()

        result = await service.separate(local_path)
        return result.to_payload()
