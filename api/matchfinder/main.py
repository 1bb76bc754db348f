import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import DEV_MODE
from .routes import include_modular_routers

logger = logging.getLogger(__name__)

app = FastAPI(title="Matchfinder API")
include_modular_routers(app)

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if DEV_MODE:
    logger.warning("[MATCHES][DEV] running with DEV_MODE enabled")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
