from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from .config import settings
from .database import create_db_engine, create_session_factory
from .errors import DowntimeError
from .middleware import logging_middleware
from .repositories.downtime_store import DowntimeStore
from .routers import downtime
from .schemas.envelope import failure_response
from .services.audit_logger import AuditLogger
from .services.downtime_service import DowntimeService
from .services.sweep_service import ReconciliationSweeper

# Setup basic logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s %(message)s',
)

logger = logging.getLogger(__name__)

# Scheduler is created here but started on application startup to avoid
# duplicate jobs when Uvicorn's auto-reload restarts the process.
scheduler = BackgroundScheduler()

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(logging_middleware)

app.include_router(downtime.router, prefix="/downtime", tags=["Downtime"])


@app.exception_handler(DowntimeError)
async def downtime_error_handler(request: Request, exc: DowntimeError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=failure_response(exc.message))


@app.get("/")
def root():
    return {"message": f"{settings.PROJECT_NAME} running"}


def run_sweep():
    try:
        app.state.sweeper.sweep()
    except DowntimeError as e:
        logger.error(f"❌ Error in downtime sweep job: {e.message}")


@app.on_event("startup")
def startup():
    engine = create_db_engine(settings.DB_URL)
    session_factory = create_session_factory(engine)

    store = DowntimeStore(session_factory)
    audit_logger = AuditLogger(session_factory, max_queue_size=settings.AUDIT_QUEUE_SIZE)
    audit_logger.start()

    app.state.engine = engine
    app.state.audit_logger = audit_logger
    app.state.downtime_service = DowntimeService(store, audit_logger)
    app.state.sweeper = ReconciliationSweeper(store)

    if settings.SWEEP_INTERVAL_MINUTES > 0 and not scheduler.running:
        scheduler.add_job(
            run_sweep,
            "interval",
            minutes=settings.SWEEP_INTERVAL_MINUTES,
            id="downtime_sweep",
            replace_existing=True,
            max_instances=1,
        )
        scheduler.start()


@app.on_event("shutdown")
def shutdown():
    if scheduler.running:
        scheduler.shutdown(wait=False)
    app.state.audit_logger.stop()
    app.state.engine.dispose()
