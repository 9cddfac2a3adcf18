"""
Security utilities and authentication
"""

import time
from collections import defaultdict

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from eventrsvp.core.config import settings
from eventrsvp.core.db import get_db
from eventrsvp.models import Organizer
from eventrsvp.services.repositories import OrganizerRepo

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer()

def get_current_organizer(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Organizer:
    """Resolve the organizer from the identity provider's signed bearer token"""
    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.ORGANIZER_TOKEN_SECRET,
            algorithms=["HS256"],
            options={"require": ["exp"]}
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid organizer token"
        )

    email = (claims.get("email") or "").strip().lower()
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid organizer token"
        )

    organizer = OrganizerRepo.get_or_create(db, email, claims.get("name"))
    db.commit()
    return organizer

def rate_limit_check(client_ip: str, limit: int = None, scope: str = "default") -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    key = f"{scope}:{client_ip}"
    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests, dropping keys with none left
    for stale_key in list(rate_limiter):
        recent = [req_time for req_time in rate_limiter[stale_key] if req_time > minute_ago]
        if recent:
            rate_limiter[stale_key] = recent
        else:
            del rate_limiter[stale_key]

    # Check limit
    if len(rate_limiter[key]) >= limit:
        return False

    # Add current request
    rate_limiter[key].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"
