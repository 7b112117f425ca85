"""Linear Vesting API - Main Application"""
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linear_vesting.config import get_settings
from linear_vesting.api.v1.router import api_router
from linear_vesting.errors import VestingError
from linear_vesting.models.database import init_db, close_db
from linear_vesting.schemas.grant import ErrorResponse
from linear_vesting.services.solana_client import close_solana_client

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Linear Vesting API", version=settings.app_version, clock=settings.clock_source)

    await init_db()
    logger.info("Database initialized")

    yield

    await close_solana_client()
    await close_db()
    logger.info("Linear Vesting API shutdown complete")


async def vesting_error_handler(request: Request, exc: VestingError) -> JSONResponse:
    """Render a rejected grant operation with its stable error code"""
    logger.warning(
        "Rejected vesting operation",
        path=request.url.path,
        error=exc.code,
        **exc.context,
    )
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(**exc.to_dict()).model_dump())


def create_app() -> FastAPI:
    """Create FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for linear token-vesting grants",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VestingError, vesting_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "cluster": settings.solana_cluster,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "linear_vesting.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
