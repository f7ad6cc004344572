import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Fact Check"


class ConversationRepository:
    """
    Stores fact-check conversations and their messages.

    Conversations use integer ids drawn from a counter document so that
    clients can address them as ``/conversations/{id}``. Every lookup is
    scoped to the owning user.
    """

    def __init__(self, conversations: Collection, messages: Collection, counters: Collection):
        self.conversations = conversations
        self.messages = messages
        self.counters = counters
        self.conversations.create_index([("user_id", ASCENDING), ("updated_at", DESCENDING)])
        self.messages.create_index([("conversation_id", ASCENDING), ("created_at", ASCENDING)])

    def _next_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {"_id": "conversations"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return counter["seq"]

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Get a user's conversations, most recently updated first, with messages embedded.

        Args:
            user_id: Owner of the conversations

        Returns:
            list: Conversation documents, each with a ``messages`` list
        """
        conversations = list(
            self.conversations.find({"user_id": user_id}).sort("updated_at", DESCENDING)
        )
        for conversation in conversations:
            conversation["messages"] = self.list_messages(conversation["_id"])
        return conversations

    def create(self, user_id: str, title: Optional[str] = None) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        conversation = {
            "_id": self._next_id(),
            "user_id": user_id,
            "title": title or DEFAULT_TITLE,
            "created_at": now,
            "updated_at": now
        }
        self.conversations.insert_one(conversation)
        logger.info(f"[Conversations] Created conversation {conversation['_id']} for user {user_id}")
        return conversation

    def find_owned(self, conversation_id: int, user_id: str) -> Optional[Dict[str, Any]]:
        return self.conversations.find_one({"_id": conversation_id, "user_id": user_id})

    def delete(self, conversation_id: int, user_id: str) -> bool:
        """Delete an owned conversation together with all of its messages."""
        result = self.conversations.delete_one({"_id": conversation_id, "user_id": user_id})
        if result.deleted_count == 0:
            return False
        self.messages.delete_many({"conversation_id": conversation_id})
        return True

    def list_messages(self, conversation_id: int) -> List[Dict[str, Any]]:
        return list(
            self.messages.find({"conversation_id": conversation_id}).sort("created_at", ASCENDING)
        )

    def add_message(
        self,
        conversation_id: int,
        role: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Append a message and bump the conversation's ``updated_at``."""
        now = datetime.now(timezone.utc)
        message = {
            "_id": str(uuid.uuid4()),
            "conversation_id": conversation_id,
            "role": role,
            "content": content,
            "metadata": metadata,
            "created_at": now
        }
        self.messages.insert_one(message)
        self.conversations.update_one(
            {"_id": conversation_id},
            {"$set": {"updated_at": now}}
        )
        return message
