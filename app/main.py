import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from starlette.middleware.base import BaseHTTPMiddleware
from app.cache import close_cache
from app.config import settings
from app.database import engine, Base
from app.routes import books, loans, reports, reservations, users
from app.services.errors import Conflict, NotFound, StoreError, ValidationError

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests."""
    async def dispatch(self, request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip} - {response.status_code}")
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup; drain background cache writes on shutdown."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    yield

    logger.info("Closing cache clients...")
    close_cache()


app = FastAPI(
    title="Library Lending API",
    description="Loans, reservations and cached loan reports for a library",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Logging middleware (last, to log everything)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"field": exc.field, "message": exc.cause},
    )

@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

@app.exception_handler(Conflict)
async def conflict_handler(request: Request, exc: Conflict):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable"},
    )


# Include routers
app.include_router(users.router)
app.include_router(books.router)
app.include_router(loans.router)
app.include_router(reservations.router)
app.include_router(reports.router)

@app.get("/helloworld", response_class=PlainTextResponse)
async def hello_world():
    return "Hello world!"

@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
