"""
Application Entry Point

FastAPI application hosting the header injection middleware, configured from
environment variables unless an explicit configuration is given.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from missing_headers.common.errors import AppError
from missing_headers.config import HeadersConfig, get_settings
from missing_headers.logging_config import setup_logging
from missing_headers.middleware import AddMissingHeadersMiddleware

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


def create_app(config: Optional[HeadersConfig] = None) -> FastAPI:
    """
    Create FastAPI application

    Args:
        config: Header configuration; loaded from settings when omitted

    Returns:
        FastAPI: Application with the middleware installed
    """
    settings = get_settings()
    if config is None:
        config = settings.to_headers_config()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Adds configured HTTP headers to requests and responses when missing",
        version="0.1.0",
    )
    app.add_middleware(AddMissingHeadersMiddleware, config=config)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """
        Handle application custom exceptions

        In production mode, error details are hidden to prevent information leakage.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(include_details=get_settings().DEBUG),
        )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health Check

        Used for service liveness probe.
        """
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "missing_headers.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
