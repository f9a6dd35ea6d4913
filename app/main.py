import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.games import router as games_router
from app.api.health import router as health_router
from app.api.history import router as history_router
from app.clients.shared import configure_collection_log
from app.core.config import settings

logging.basicConfig(
    level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
configure_collection_log()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(games_router, prefix="/api")
app.include_router(history_router, prefix="/api")


@app.get("/", tags=["root"])
def root() -> dict:
    return {"message": "ok"}
