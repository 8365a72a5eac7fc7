import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Query
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response

from .config import Settings, settings as default_settings
from .errors import InvalidRequestError, ServiceError
from .logging_config import configure_logging
from .models import EndpointInfo, ErrorResponse, OgImageMetadata, ServiceInfo
from .screenshot_service import ScreenshotService
from .utils import parse_og_request, parse_screenshot_request

logger = logging.getLogger(__name__)

SERVICE_INFO = ServiceInfo(
    message="Screenshot Service",
    endpoints=[
        EndpointInfo(
            method="POST",
            path="/screenshot",
            body="{ url: string, zoom?: number }",
            returns="jpeg image",
        ),
        EndpointInfo(
            method="POST",
            path="/og",
            body="{ url: string }",
            query="?metadata=true (optional, returns JSON instead of image)",
            returns="og image binary (or JSON with ?metadata=true)",
        ),
    ],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def read_json_body(request: Request) -> Any:
    """Decode the request body, mapping decode failures to a 400"""
    try:
        return await request.json()
    except (ValueError, RecursionError):
        # JSONDecodeError, UnicodeDecodeError, oversized int literals, deep nesting
        raise InvalidRequestError("Invalid JSON body")


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[ScreenshotService] = None,
) -> FastAPI:
    """Build the application around one process-lifetime capture service"""
    settings = settings or default_settings
    service = service or ScreenshotService(settings)
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        await service.initialize()
        yield
        # Shutdown
        await service.cleanup()

    app = FastAPI(
        title="Page Capture API",
        description="Capture page screenshots and proxy Open Graph images",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        body = ErrorResponse(error=exc.message, **exc.extra)
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(by_alias=True, exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", response_model=ServiceInfo, response_model_exclude_none=True)
    async def index():
        """Describe the available endpoints"""
        return SERVICE_INFO

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        is_healthy = await service.health_check()
        return {
            "status": "healthy" if is_healthy else "unhealthy",
            "service": "page-capture-service",
        }

    @app.post("/screenshot", responses=ERROR_RESPONSES)
    async def capture_screenshot(request: Request):
        """Capture a JPEG screenshot of a URL at an optional zoom level"""
        screenshot_request = parse_screenshot_request(await read_json_body(request))

        image = await service.capture_screenshot(screenshot_request)

        logger.info(
            "Screenshot captured url=%s zoom=%s",
            screenshot_request.url,
            screenshot_request.zoom,
        )
        return Response(
            content=image,
            media_type="image/jpeg",
            headers={"Content-Disposition": 'attachment; filename="screenshot.jpeg"'},
        )

    @app.post(
        "/og",
        responses={
            **ERROR_RESPONSES,
            404: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
        },
    )
    async def og_image(request: Request, metadata: Optional[str] = Query(default=None)):
        """Extract a page's Open Graph image and proxy it, or return its URL"""
        og_request = parse_og_request(await read_json_body(request))

        image_url = await service.find_og_image(og_request.url)

        logger.info("OG image extracted page=%s image=%s", og_request.url, image_url)

        if metadata == "true":
            return OgImageMetadata(url=image_url)

        image = await service.fetch_image(image_url)
        return Response(
            content=image.content,
            media_type=image.content_type,
            headers={
                "Content-Disposition": 'inline; filename="og-image"',
                "X-OG-Image-URL": image_url,
            },
        )

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
