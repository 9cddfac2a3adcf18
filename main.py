"""
Event RSVP System - FastAPI Backend
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from eventrsvp.core.config import settings
from eventrsvp.core.db import engine, Base
from eventrsvp.api import routes_organizer, routes_public, routes_rsvp, ws
from eventrsvp.services.errors import NotFound, Unauthorized
from eventrsvp.services.storage_service import InvalidUpload
from eventrsvp.utils.responses import error_response

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
    yield
    logger.info("Application shutdown")

app = FastAPI(
    title="Event RSVP System",
    description="Events, guest RSVPs and organizer notifications",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded event images
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_rsvp.router, prefix="/rsvp", tags=["rsvp"])
app.include_router(routes_organizer.router, prefix="/organizer", tags=["organizer"])
app.include_router(ws.router, prefix="/ws", tags=["websocket"])

@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return error_response(message=exc.message, error_code=exc.error_code, status_code=404)

@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    return error_response(message=exc.message, error_code=exc.error_code, status_code=403)

@app.exception_handler(InvalidUpload)
async def invalid_upload_handler(request: Request, exc: InvalidUpload):
    return error_response(message=exc.message, error_code=exc.error_code, status_code=400)

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(message="Something went wrong. Please try again.", error_code="INTERNAL_ERROR", status_code=500)

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
