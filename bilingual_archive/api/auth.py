"""Shared-passcode gate for admin endpoints."""
import hmac
import logging

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

# Setup logging
logger = logging.getLogger(__name__)

PASSCODE_HEADER = "X-Admin-Passcode"
passcode_header = APIKeyHeader(name=PASSCODE_HEADER, auto_error=False)


def passcode_matches(candidate: str, expected: str) -> bool:
    """Compare passcodes in constant time."""
    return hmac.compare_digest(candidate.encode(), expected.encode())


async def require_admin(
    request: Request,
    passcode: str = Security(passcode_header),
) -> None:
    """Reject the request unless it carries the admin passcode."""
    if not passcode:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin passcode is missing",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    expected = request.app.state.settings.admin_passcode
    if not passcode_matches(passcode, expected):
        logger.warning(f"Rejected admin request to {request.url.path}: wrong passcode")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin passcode",
        )
