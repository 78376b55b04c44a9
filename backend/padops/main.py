import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .admin.router import router as admin_router
from .fault_categories.router import router as fault_categories_router
from .incident_types.router import router as incident_types_router
from .incidents.router import router as incidents_router
from .jobs.router import router as jobs_router
from .locks.manager import ResourceLockManager
from .locks.router import router as locks_router
from .operators.router import router as operators_router
from .pads.router import router as pads_router
from .shared.backup import BackupManager
from .shared.config import Settings, settings as default_settings
from .shared.logging import RequestLogMiddleware, setup_logging
from .shared.sequence import SequenceGenerator
from .shared.store import TABLES, JsonStore

logger = logging.getLogger(__name__)


async def backup_loop(backups: BackupManager, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        for table in TABLES:
            try:
                await asyncio.to_thread(backups.backup_file, table)
            except Exception:
                logger.exception("Scheduled backup failed for %s", table)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    tasks = [
        asyncio.create_task(app.state.lock_manager.run_sweeper(cfg.LOCK_SWEEP_INTERVAL_SECONDS)),
        asyncio.create_task(backup_loop(app.state.backups, cfg.BACKUP_INTERVAL_SECONDS)),
    ]
    logger.info("padops started (env=%s, data=%s)", cfg.APP_ENV, cfg.DATA_DIR)
    try:
        yield
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def unhandled_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Something broke!"})


def create_app(settings: Optional[Settings] = None, configure_logging: bool = True) -> FastAPI:
    cfg = settings or default_settings
    if configure_logging:
        setup_logging(cfg)

    app = FastAPI(
        title="PadOps API",
        version="0.1.0",
        openapi_url=f"{cfg.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    store = JsonStore(cfg.DATA_DIR)
    app.state.settings = cfg
    app.state.store = store
    app.state.sequences = SequenceGenerator(store)
    app.state.backups = BackupManager(store, cfg.backup_dir, keep=cfg.BACKUP_KEEP)
    app.state.lock_manager = ResourceLockManager(
        max_wait=cfg.LOCK_MAX_WAIT_SECONDS,
        poll_interval=cfg.LOCK_POLL_INTERVAL_SECONDS,
        stale_after=cfg.LOCK_STALE_AFTER_SECONDS,
        logger=logging.getLogger("padops.locks"),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(Exception, unhandled_error)

    @app.get(f"{cfg.API_PREFIX}/healthz")
    def healthz():
        return {"status": "ok", "app": "padops"}

    app.include_router(operators_router)
    app.include_router(pads_router)
    app.include_router(jobs_router)
    app.include_router(incidents_router)
    app.include_router(incident_types_router)
    app.include_router(fault_categories_router)
    app.include_router(locks_router)
    app.include_router(admin_router)
    return app


app = create_app()
