# designz_loader/main.py
import logging
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from tortoise.contrib.fastapi import register_tortoise
from designz_loader.core.config import settings
from designz_loader.core.db import TORTOISE_ORM
from designz_loader.api.uploads import router as uploads_router
from designz_loader.api.websocket import router as websocket_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="WeDesignz Bulk Design Loader")
app.include_router(uploads_router)
app.include_router(websocket_router)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
async def health():
    return {"status": "ok"}

register_tortoise(
    app,
    config=TORTOISE_ORM,
    generate_schemas=True,
    add_exception_handlers=True,
)
