from pymongo.collection import Collection
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from bson import ObjectId
from bson.errors import InvalidId


class UserRepository:
    """Repository for user accounts stored in MongoDB"""

    def __init__(self, collection: Collection):
        self.collection = collection
        # Emails are unique per account
        self.collection.create_index("email", unique=True)

    def create_user(self, name: str, email: str, password_hash: str) -> Dict[str, Any]:
        """
        Insert a new user document.

        Args:
            name: Display name
            email: Email address (stored lower-case)
            password_hash: bcrypt hash of the password

        Returns:
            The inserted document including its ``_id``

        Raises:
            pymongo.errors.DuplicateKeyError: If the email is already registered
        """
        now = datetime.now(timezone.utc)
        user_doc = {
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now
        }

        result = self.collection.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        return user_doc

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": email.lower()})

    def find_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Look up a user by the string form of its ObjectId; malformed ids yield None."""
        try:
            return self.collection.find_one({"_id": ObjectId(user_id)})
        except (InvalidId, TypeError):
            return None

    def email_exists(self, email: str) -> bool:
        return self.collection.count_documents({"email": email.lower()}) > 0
