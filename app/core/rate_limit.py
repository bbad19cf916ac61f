"""Per-IP rate limiting (SlowAPI); honours X-Forwarded-For behind a proxy."""
from fastapi import Request

from slowapi import Limiter

from .config import settings


def _get_client_ip(request: Request) -> str:
    """Real client IP behind a proxy (ngrok, nginx)."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


def upload_rate_limit() -> str:
    """POST /api/upload limit; read per request so RATE_LIMIT_PER_MINUTE changes apply."""
    return f"{settings.rate_limit_per_minute}/minute"


limiter = Limiter(key_func=_get_client_ip, enabled=settings.rate_limit_enabled)
