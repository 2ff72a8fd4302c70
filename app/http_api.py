"""FastAPI routes for posting quote requests and completing them with an SMS code."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.facade import QuoteJobFacade
from domain.errors import JobNotAwaitingOtpError, JobNotFoundError, QuoteRequestValidationError
from domain.models import ContactDetails, JobStatus, JobStatusKind, JobTiming, PhotoAttachments, QuoteRequest
from domain.ports import ClockPort, LoggerPort

_REQUIRED_FIELDS = ["categoryName", "postcode", "description", "contact"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ContactPayload(_CamelModel):
    name: str = ""
    email: str = ""
    phone: str = ""


class PhotosPayload(_CamelModel):
    original: Optional[str] = None
    visualization: Optional[str] = None


class QuoteRequestPayload(_CamelModel):
    category_slug: str = Field(default="", alias="categorySlug")
    category_name: str = Field(default="", alias="categoryName", examples=["Plumbing"])
    postcode: str = Field(default="", examples=["2000"])
    suburb: Optional[str] = None
    description: str = Field(default="", examples=["Leaking tap"])
    property_type: str = Field(default="house", alias="propertyType")
    timing: JobTiming = JobTiming.FLEXIBLE
    contact: ContactPayload = Field(default_factory=ContactPayload)
    photos: Optional[PhotosPayload] = None

    def to_domain(self) -> QuoteRequest:
        photos = None
        if self.photos is not None:
            photos = PhotoAttachments(
                original=self.photos.original,
                visualization=self.photos.visualization,
            )
        return QuoteRequest(
            category_name=self.category_name,
            postcode=self.postcode,
            description=self.description,
            contact=ContactDetails(
                name=self.contact.name,
                email=self.contact.email,
                phone=self.contact.phone,
            ),
            category_slug=self.category_slug,
            suburb=self.suburb,
            property_type=self.property_type,
            timing=self.timing,
            photos=photos,
        )


class OtpPayload(_CamelModel):
    otp: Optional[str] = None


class JobStatusResponse(_CamelModel):
    job_id: str = Field(alias="jobId")
    status: JobStatusKind
    message: str
    external_job_id: Optional[str] = Field(default=None, alias="externalJobId")
    external_job_url: Optional[str] = Field(default=None, alias="externalJobUrl")
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, status: JobStatus) -> "JobStatusResponse":
        return cls(
            job_id=status.job_id,
            status=status.status,
            message=status.message,
            external_job_id=status.external_job_id,
            external_job_url=status.external_job_url,
            error=status.error,
        )


def _status_json(status: JobStatus, status_code: int = 200) -> JSONResponse:
    body = JobStatusResponse.from_domain(status).model_dump(mode="json", by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    facade: QuoteJobFacade,
    *,
    clock: ClockPort,
    logger: LoggerPort,
    cors_origins: Sequence[str] = ("*",),
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await facade.shutdown()
        logger.info("server_stopped")

    app = FastAPI(title="Quote Poster", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": _validation_errors(exc)},
        )

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": clock.now().isoformat()}

    @app.post("/api/jobs", status_code=202, tags=["jobs"])
    async def create_job(payload: QuoteRequestPayload) -> JSONResponse:
        try:
            initial = await facade.start_job(payload.to_domain())
        except QuoteRequestValidationError as exc:
            logger.warning("job_request_rejected", missing=exc.missing)
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Missing required fields",
                    "missing": exc.missing,
                    "required": _REQUIRED_FIELDS,
                },
            )
        return _status_json(initial, status_code=202)

    @app.get("/api/jobs", tags=["jobs"])
    async def list_jobs() -> dict[str, Any]:
        return {
            "jobs": [
                JobStatusResponse.from_domain(status).model_dump(mode="json", by_alias=True, exclude_none=True)
                for status in facade.list_jobs()
            ]
        }

    @app.get("/api/jobs/{job_id}", tags=["jobs"])
    async def get_job(job_id: str) -> JSONResponse:
        status = facade.get_job(job_id)
        if status is None:
            return JSONResponse(status_code=404, content={"error": "Job not found", "jobId": job_id})
        return _status_json(status)

    @app.post("/api/jobs/{job_id}/otp", tags=["jobs"])
    async def submit_otp(job_id: str, payload: OtpPayload) -> JSONResponse:
        code = (payload.otp or "").strip()
        if not code:
            return JSONResponse(status_code=400, content={"error": "OTP code is required"})
        try:
            final = await facade.submit_otp(job_id, code)
        except JobNotFoundError:
            return JSONResponse(status_code=404, content={"error": "Job not found", "jobId": job_id})
        except JobNotAwaitingOtpError as exc:
            return JSONResponse(
                status_code=400,
                content={"error": "Job is not awaiting OTP", "currentStatus": exc.current_status},
            )
        return _status_json(final)

    @app.delete("/api/jobs/{job_id}", tags=["jobs"])
    async def cancel_job(job_id: str) -> dict[str, Any]:
        await facade.cancel_job(job_id)
        return {"success": True, "message": "Job cancelled"}

    return app


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]
