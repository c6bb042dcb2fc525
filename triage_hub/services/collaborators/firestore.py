"""
Firestore-backed collaborators.

Collections used:
- session_tokens/{token}: {"user_id": ...}
- users/{user_id}: {"role", "email", "is_verified", "is_active"}
- messages/{auto_id}: private messages
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from triage_hub.config.firebase import get_db
from triage_hub.services.collaborators.base import (
    AuthenticatedUser,
    MessageStore,
    SessionAuthenticator,
    StoredMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "RESIDENT"


class FirestoreSessionAuthenticator(SessionAuthenticator):
    """
    Resolves handshake tokens stored in Firestore.

    The user must exist, be verified and not be deactivated.
    """

    def authenticate(self, token: Optional[str]) -> Optional[AuthenticatedUser]:
        if not token:
            return None

        try:
            db = get_db()
            token_doc = db.collection("session_tokens").document(token).get()
            if not token_doc.exists:
                return None

            user_id = (token_doc.to_dict() or {}).get("user_id")
            if not user_id:
                return None

            user_doc = db.collection("users").document(str(user_id)).get()
            if not user_doc.exists:
                return None

            user = user_doc.to_dict() or {}
            if not user.get("is_verified") or user.get("is_active") is False:
                logger.info(f"Rejected handshake for unverified or inactive user {user_id}")
                return None

            return AuthenticatedUser(
                user_id=user_id,
                role=user.get("role") or DEFAULT_ROLE,
                email=user.get("email"),
            )
        except Exception as e:
            logger.error(f"Socket authentication error: {e}", exc_info=True)
            return None


class FirestoreMessageStore(MessageStore):
    """Writes private messages to the `messages` collection."""

    def save_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str = "text"
    ) -> StoredMessage:
        db = get_db()
        created_at = datetime.now(timezone.utc)
        message_ref = db.collection("messages").document()
        message_ref.set({
            "content": content,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "message_type": message_type,
            "created_at": created_at,
        })
        return StoredMessage(
            message_id=message_ref.id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            message_type=message_type,
            created_at=created_at,
        )
