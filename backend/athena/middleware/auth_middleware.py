from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict

from athena.api.dependencies import get_token_service
from athena.services.token_service import TokenService

# Security scheme
security = HTTPBearer()


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    token_service: TokenService = Depends(get_token_service)
) -> Dict:
    """
    Verify the bearer access token and return its payload

    Args:
        credentials: Bearer token from Authorization header
        token_service: JWT validator

    Returns:
        Token payload with user_id and email

    Raises:
        HTTPException: 401 if the token is invalid, expired or not an access token
    """
    payload = token_service.verify_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return payload


async def get_current_user_id(token_payload: Dict = Depends(verify_token)) -> str:
    """Extract user ID from verified token"""
    return token_payload["user_id"]
