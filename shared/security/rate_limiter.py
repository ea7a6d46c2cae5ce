from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config.settings import RATE_LIMIT_ENABLED

def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the X-User-Id header when present, else the client's IP address.
    """
    user_id = request.headers.get("X-User-Id")
    if user_id and user_id.strip():
        return f"user:{user_id.strip()}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=user_id_or_ip, enabled=RATE_LIMIT_ENABLED)
