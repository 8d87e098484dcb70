"""
slowapi limiter shared by main.py and the routes that carry their own limits
"""

import hashlib
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings


def client_key(request: Request) -> str:
    """Bucket by bearer token so users behind one address do not share a quota"""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return "token:" + hashlib.sha256(token.encode()).hexdigest()[:32]
    return get_remote_address(request)


def generate_limit() -> str:
    return settings.generate_rate_limit


limiter = Limiter(key_func=client_key, default_limits=[settings.rate_limit])
