"""
Telemedicine backend: patients, doctors, pharmacists and admins.

ARCHITECTURE:
- FastAPI routers per concern under /api
- SQLAlchemy models, SQLite by default
- Bearer JWT; role always read from the users table

SAFETY MODEL:
- Status changes follow fixed transition tables; anything else is a 409
- Multi-row clinical writes commit as one transaction
- Symptom checker output is guidance only and always carries a disclaimer
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from telemed.api.routes import (
    admin,
    appointments,
    auth,
    doctors,
    medical_records,
    medicines,
    pharmacies,
    pharmacy,
    symptoms,
)
from telemed.core.config import settings
from telemed.core.exceptions import register_exception_handlers
from telemed.core.rate_limiter import RateLimitMiddleware
from telemed.db.init_db import init_db

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    1. Create database tables
    2. Provision the admin account
    """
    print("[*] Initializing database...")
    init_db()
    print("[OK] Database initialized")
    yield


app = FastAPI(
    title="Telemed API",
    description="Appointments, consultations, e-prescriptions and pharmacy inventory.",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# SECURITY: Trust only specific hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,  # Cache preflight for 10 minutes
    expose_headers=["Content-Type", "X-Data-Source"],
)

# SECURITY: Rate limiting to prevent brute force and DoS attacks
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(appointments.router, prefix="/api/appointments", tags=["appointments"])
app.include_router(doctors.router, prefix="/api/doctors", tags=["doctors"])
app.include_router(medical_records.router, prefix="/api/medical-records", tags=["medical-records"])
app.include_router(pharmacy.router, prefix="/api/pharmacy", tags=["pharmacy"])
app.include_router(pharmacies.router, prefix="/api/pharmacies", tags=["pharmacies"])
app.include_router(medicines.router, prefix="/api/medicines", tags=["medicines"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(symptoms.router, prefix="/api/symptoms", tags=["symptoms"])


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
