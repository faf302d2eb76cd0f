from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from labelcheck.core.config import settings
from labelcheck.database import init_db
from labelcheck.api.v1 import rule_sets, checks, uploads, states
from labelcheck.exceptions.base import AppException, ValidationException


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title = "LabelCheck",
    description= "Cannabis label compliance checking API",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins= settings.CORS_ORIGINS,
    allow_credentials = True,
    allow_methods = ["*"],
    allow_headers = ["*"],
)

app.include_router(states.router, prefix="/api/v1")
app.include_router(rule_sets.router, prefix="/api/v1")
app.include_router(checks.router, prefix="/api/v1")
app.include_router(checks.analyze_router, prefix="/api/v1")
app.include_router(uploads.router, prefix="/api/v1")

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code}
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "code": ValidationException.code}
    )

@app.get("/")
def root():
    return {"message": "LabelCheck API"}
