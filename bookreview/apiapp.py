#region imports
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from bookreview.Helper.Exceptions import CatalogError
from bookreview.Helper.QueryClient import query_client
from bookreview.Helper.SessionStore import SIGNED_OUT, SessionEvent, session_store
from bookreview.Helper.Settings import CFG
from bookreview.Repository.SqlAlchemySetup import SqlAlchemySetup
#endregion imports

logger.remove()
logger.add(sys.stderr, level=CFG.log_level, format="{time} {level} {message}")

def forget_user_queries(event: SessionEvent):
    if event.name == SIGNED_OUT:
        query_client.invalidate("profile", event.user_id)
        query_client.invalidate("user-books", event.user_id)
        query_client.invalidate("user-reviews", event.user_id)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if SqlAlchemySetup.async_engine is None:
        SqlAlchemySetup.configure()
    await SqlAlchemySetup.create_async_tables()
    session_store.start()
    session_store.subscribe(forget_user_queries)
    logger.info("Book review service started")
    try:
        yield
    finally:
        session_store.close()
        session_store.unsubscribe(forget_user_queries)
        await SqlAlchemySetup.dispose()
        logger.info("Book review service stopped")

fastapiapp = FastAPI(
    title="Book Review",
    description="Browse, add and review books. Ratings are aggregated from the reviews of each book.",
    version="1.0.0",
    lifespan=lifespan,
)

@fastapiapp.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "kind": exc.kind})

@fastapiapp.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Invalid input", "kind": "validation_error", "errors": jsonable_encoder(errors)},
    )

@fastapiapp.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(status_code=404, content={"detail": "Page not found", "kind": "not_found"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "kind": "http_error"})
