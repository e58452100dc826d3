from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from core import config, db
from core.errors import AppError
from core.logging import configure_logging
from core.schemas import ApiResponse
from restaurants import router as restaurants_router
from transactions import router as transactions_router
from transactions.middleware import ActivityLoggingMiddleware
from users import router as users_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(level=config.log_level())
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        await db.apply_schema()
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="Restaurant Finder API", lifespan=lifespan)

# CORS is added last so it wraps the activity log; preflights never get recorded.
app.add_middleware(ActivityLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(status_code: int, message: str, error=None, headers=None) -> JSONResponse:
    body = ApiResponse.fail(message, error).model_dump(mode="json", exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(400, "Validation failed", jsonable_encoder(exc.errors()))


app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(restaurants_router.router, tags=["restaurants"])
app.include_router(transactions_router.router, tags=["transactions"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "restaurant-finder api"}


def run() -> None:
    uvicorn.run(
        "main:app",
        host=config.env_str("HOST", "0.0.0.0"),
        port=config.env_int("PORT", 3000),
    )


if __name__ == "__main__":
    run()
