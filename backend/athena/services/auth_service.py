import logging
from typing import Dict, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from athena.repository.user_repository import UserRepository
from athena.services.password_service import PasswordService
from athena.services.token_service import TokenService
from athena.models.user import UserSignupRequest, UserLoginRequest, UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Signup, login, token refresh and token-to-user resolution"""

    def __init__(self, user_repo: UserRepository, token_service: TokenService):
        self.user_repo = user_repo
        self.token_service = token_service
        self.password_service = PasswordService()

    def signup(self, request: UserSignupRequest) -> Tuple[bool, Optional[Dict], Optional[str]]:
        """
        Register a new user

        Args:
            request: User signup request data

        Returns:
            Tuple of (success, user_data_with_tokens, error_message)
        """
        if self.user_repo.email_exists(request.email):
            return False, None, "Email already registered"

        password_hash = self.password_service.hash_password(request.password)

        try:
            user_doc = self.user_repo.create_user(
                name=request.name,
                email=request.email,
                password_hash=password_hash
            )
        except DuplicateKeyError:
            # Lost a race with a concurrent signup for the same email
            return False, None, "Email already registered"

        logger.info(f"[Auth] New user registered: {user_doc['email']}")
        return True, self._token_payload(user_doc), None

    def login(self, request: UserLoginRequest) -> Tuple[bool, Optional[Dict], Optional[str]]:
        """
        Authenticate a user and issue tokens

        Args:
            request: User login request data

        Returns:
            Tuple of (success, user_data_with_tokens, error_message)
        """
        user_doc = self.user_repo.find_by_email(request.email)
        if not user_doc:
            return False, None, "Invalid email or password"

        if not self.password_service.verify_password(request.password, user_doc["password_hash"]):
            logger.warning(f"[Auth] Failed login for {request.email}")
            return False, None, "Invalid email or password"

        return True, self._token_payload(user_doc), None

    def refresh_access_token(self, refresh_token: str) -> Tuple[bool, Optional[Dict], Optional[str]]:
        payload = self.token_service.verify_refresh_token(refresh_token)
        if not payload:
            return False, None, "Invalid or expired refresh token"

        user_id = payload["user_id"]
        user_doc = self.user_repo.find_by_id(user_id)
        if not user_doc:
            return False, None, "User not found"

        return True, {
            "access_token": self.token_service.create_access_token(user_id, user_doc["email"]),
            "token_type": "bearer"
        }, None

    def verify_token(self, access_token: str) -> Tuple[bool, Optional[Dict], Optional[str]]:
        """
        Resolve an access token to the public user record

        Returns:
            Tuple of (success, user_data, error_message)
        """
        payload = self.token_service.verify_access_token(access_token)
        if not payload:
            return False, None, "Invalid or expired token"

        user_doc = self.user_repo.find_by_id(payload["user_id"])
        if not user_doc:
            return False, None, "User not found"

        return True, self._user_response(user_doc).model_dump(), None

    def _token_payload(self, user_doc: Dict) -> Dict:
        user_id = str(user_doc["_id"])
        return {
            "access_token": self.token_service.create_access_token(user_id, user_doc["email"]),
            "refresh_token": self.token_service.create_refresh_token(user_id, user_doc["email"]),
            "token_type": "bearer",
            "user": self._user_response(user_doc).model_dump()
        }

    @staticmethod
    def _user_response(user_doc: Dict) -> UserResponse:
        return UserResponse(
            id=str(user_doc["_id"]),
            name=user_doc["name"],
            email=user_doc["email"],
            created_at=user_doc["created_at"]
        )
