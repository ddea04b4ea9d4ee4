"""ULIS Home - student housing marketplace API."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.database import Base, engine
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import User, House, Review, Reservation, AuditLog  # noqa: F401
from app.routers import auth, users, houses, reservations

settings = get_settings()
log = logging.getLogger("uvicorn.error")
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(houses.router)
app.include_router(reservations.router)

scheduler = None


@app.on_event("startup")
def startup():
    global scheduler
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        log.warning("Database startup failed (tables skipped). Check DATABASE_URL and network. Error: %s", e)

    # Expiry is lazy on read; the sweep is an optional backstop
    if settings.reservation_expiry_sweep_enabled:
        from apscheduler.schedulers.background import BackgroundScheduler
        from app.services.reservation_expiry import run_reservation_expiry_job
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            run_reservation_expiry_job,
            "interval",
            minutes=settings.reservation_expiry_sweep_minutes,
        )
        scheduler.start()
        log.info("Reservation expiry sweep scheduled every %d minute(s)", settings.reservation_expiry_sweep_minutes)


@app.on_event("shutdown")
def shutdown():
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
