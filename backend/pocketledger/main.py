from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from .env file in project root
# backend/pocketledger/main.py -> backend -> project root
env_path = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(env_path)

from pocketledger.api.routes import router as api_router  # noqa: E402
from pocketledger.core.config import get_settings  # noqa: E402
from pocketledger.core.exceptions import NotFoundError, ValidationError  # noqa: E402
from pocketledger.core.logging import get_logger, setup_logging  # noqa: E402
from pocketledger.middleware.bot_protection import create_bot_protection_middleware  # noqa: E402

settings = get_settings()
setup_logging(settings)
logger = get_logger("pocketledger.main")

app = FastAPI(title="PocketLedger API", version="0.1.0")

LOCALHOST_ORIGINS = [
    "http://localhost:8081",
    "http://localhost:19006",
    "http://127.0.0.1:8081",
    "http://127.0.0.1:19006",
]

CORS_ORIGINS = {
    "development": LOCALHOST_ORIGINS,
    "production": [],
}

origins = CORS_ORIGINS.get(settings.environment, CORS_ORIGINS["development"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(create_bot_protection_middleware(settings))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


app.include_router(api_router)

logger.info(f"PocketLedger API initialized (environment={settings.environment})")
