from fastapi import Depends, HTTPException, status, Request
from fastapi.security import APIKeyHeader
from .api_key import verify_api_key

# Customer identity, asserted by the gateway in front of this service
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)

# Defines the expected internal (admin) header
api_key_header = APIKeyHeader(name="X-Internal-API-Key", auto_error=False)

async def get_current_user(request: Request, user_id: str = Depends(user_id_header)) -> str:
    """Dependency returning the calling customer's user id."""
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user_id.strip()
    return request.state.user_id

async def verify_internal_api_key(api_key: str = Depends(api_key_header)) -> bool:
    """Dependency to validate admin requests."""
    if not verify_api_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing X-Internal-API-Key header"
        )
    return True
