from __future__ import annotations

import logging
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ApiError
from .routers import accounts as accounts_router
from .routers import todos as todos_router
from .services import Services, build_firebase_services
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "accounts", "description": "Signup and login against the identity provider."},
    {"name": "todos", "description": "Per-user CRUD operations for Todo items."},
]


# PUBLIC_INTERFACE
def create_app(
    services: Services,
    cors_allow_origins: Optional[List[str]] = None,
    strip_bearer_prefix: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application around explicitly supplied collaborators.

    Args:
        services: identity and document store collaborators used by every handler.
        cors_allow_origins: allowed origins; None, [] or ['*'] allow all.
        strip_bearer_prefix: strip a leading 'Bearer ' from the Authorization header.
    """
    app = FastAPI(
        title="Todo Backend",
        description="Todo API with signup/login and per-user todos stored in Firestore.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.services = services
    app.state.strip_bearer_prefix = strip_bearer_prefix

    origins = cors_allow_origins or ["*"]
    allow_all = origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        """Render domain errors as {"error": message}."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a 400 for bodies that are not JSON objects or carry fields of the wrong type.

        Response format:
            {
                "error": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=400,
            content={
                "error": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy"}

    app.include_router(accounts_router.router)
    app.include_router(todos_router.router)
    return app


def create_app_from_settings(settings: Settings) -> FastAPI:
    return create_app(
        build_firebase_services(settings),
        cors_allow_origins=settings.cors_allow_origins,
        strip_bearer_prefix=settings.strip_bearer_prefix,
    )


# PUBLIC_INTERFACE
def app_factory() -> FastAPI:
    """Factory for ``uvicorn --factory src.todo_api.main:app_factory``."""
    return create_app_from_settings(get_settings())


# PUBLIC_INTERFACE
def run() -> None:
    """
    Process entry point: load settings, wire Firebase collaborators, serve with uvicorn.

    A missing required environment variable raises ConfigError and nothing is served.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app_from_settings(settings)
    logger.info("Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
