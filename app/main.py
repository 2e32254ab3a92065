import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.session import engine
from app.db.base import Base
from app.db import models  # noqa: F401

# Import all route modules once
from app.api.routes import (
    auth,
    users,
    client,
    shifts,
    mileages,
    invoices,
    dashboard,
    exports,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.PROJECT_NAME)

# ===============================
# CORS CONFIGURATION
# ===============================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===============================
# CREATE DATABASE TABLES
# ===============================
Base.metadata.create_all(bind=engine)

# ===============================
# INCLUDE ROUTERS
# ===============================
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(client.router)
app.include_router(shifts.router)
app.include_router(mileages.router)
app.include_router(invoices.router)
app.include_router(dashboard.router)
app.include_router(exports.router)

# ===============================
# ROOT ENDPOINT
# ===============================
@app.get("/")
def root():
    return {"status": "Backend running successfully"}
