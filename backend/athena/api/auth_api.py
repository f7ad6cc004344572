from fastapi import APIRouter, HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from athena.api.dependencies import get_auth_service
from athena.models.user import (
    UserSignupRequest,
    UserLoginRequest,
    RefreshTokenRequest,
    TokenResponse,
    AccessTokenResponse,
    UserResponse
)
from athena.services.auth_service import AuthService

# Create router
router = APIRouter()

# Security scheme for protected routes
security = HTTPBearer()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: UserSignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Register a new user

    Args:
        request: User signup data (name, email, password)

    Returns:
        Access token, refresh token, and user data

    Raises:
        HTTPException: If email already exists
    """
    success, data, error = auth_service.signup(request)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error
        )

    return data


@router.post("/login", response_model=TokenResponse)
async def login(request: UserLoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Authenticate a user

    Raises:
        HTTPException: If credentials are invalid
    """
    success, data, error = auth_service.login(request)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error
        )

    return data


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh_token(request: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Exchange a refresh token for a new access token"""
    success, data, error = auth_service.refresh_access_token(request.refresh_token)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error
        )

    return data


@router.post("/logout")
async def logout():
    """
    Logout user (client-side token removal)

    Tokens are stateless JWTs, so logging out means the client discards them.
    """
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Get current authenticated user's information"""
    success, user_data, error = auth_service.verify_token(credentials.credentials)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error,
            headers={"WWW-Authenticate": "Bearer"}
        )

    return user_data
