"""
AusflugFinder API entry point
Swiss excursion planner backend
"""

from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.staticfiles import StaticFiles

from ausflug.api.v1.api import api_router
from ausflug.core.config import settings
from ausflug.core.database import async_session, close_db, init_db
from ausflug.core.errors import register_exception_handlers
from ausflug.core.logging_config import setup_logging
from ausflug.core.middleware import AccessLogMiddleware, SecurityHeadersMiddleware
from ausflug.core.rate_limit import RateLimitMiddleware
from ausflug.core.redis import close_redis, init_redis
from ausflug.core.security import get_user_by_token
from ausflug.core.websocket import manager as ws_manager
from ausflug.services.background_tasks import start_background_tasks, stop_background_tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = setup_logging()
    logger.info(f"🚀 Starting {settings.APP_NAME}...")

    await init_db()
    logger.info("✅ Database initialised")

    try:
        await init_redis()
        logger.info("✅ Redis initialised")
    except Exception as e:
        logger.warning(f"⚠️ Redis unavailable, caching and rate limiting degraded: {e}")

    await start_background_tasks()
    logger.info("✅ Background tasks started")

    yield

    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")
    await stop_background_tasks()
    await close_redis()
    await close_db()
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description="Ausflüge in der Schweiz entdecken und planen",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(AccessLogMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

UPLOAD_DIR = Path(settings.UPLOAD_DIR)
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")

app.include_router(api_router, prefix="/api/v1")


@app.websocket("/ws")
async def notifications_socket(websocket: WebSocket, token: str = Query(None)):
    """Real-time notifications for the authenticated user"""
    user = None
    if token:
        async with async_session() as db:
            user = await get_user_by_token(db, token)
    if user is None:
        await websocket.accept()
        await websocket.close(code=1008, reason="Authentication required")
        return

    await ws_manager.connect(websocket, user.id)
    try:
        while True:
            raw = await websocket.receive_text()
            await ws_manager.handle_message(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await ws_manager.disconnect(websocket)


@app.get("/")
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "websocket_connections": ws_manager.client_count,
    }


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", type=str, default=settings.HOST)
    parser.add_argument("--port", type=int, default=int(settings.PORT))
    args = parser.parse_args()

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=settings.DEBUG,
        log_level="info",
    )
