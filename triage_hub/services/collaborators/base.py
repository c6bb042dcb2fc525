"""
Interfaces of the collaborators the real-time channel depends on.

Authentication and message persistence live outside this service; these
ABCs are the only surface it uses.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class AuthenticatedUser:
    """Identity established by the handshake."""

    def __init__(self, user_id: str, role: str, email: Optional[str] = None):
        self.user_id = str(user_id)
        self.role = (role or "").upper()
        self.email = email

    def __repr__(self) -> str:
        return f"AuthenticatedUser({self.user_id!r}, role={self.role!r})"


class StoredMessage:
    """A private message after it has been persisted."""

    def __init__(
        self,
        message_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str,
        created_at: datetime
    ):
        self.message_id = message_id
        self.sender_id = sender_id
        self.receiver_id = receiver_id
        self.content = content
        self.message_type = message_type
        self.created_at = created_at


class SessionAuthenticator(ABC):
    """Verifies handshake tokens."""

    @abstractmethod
    def authenticate(self, token: Optional[str]) -> Optional[AuthenticatedUser]:
        """
        Resolve a token to a user.

        Returns:
            AuthenticatedUser, or None if the token is missing, invalid, or
            belongs to an unverified / inactive user
        """
        pass


class MessageStore(ABC):
    """Durable storage for private messages."""

    @abstractmethod
    def save_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str = "text"
    ) -> StoredMessage:
        """
        Persist a private message.

        Raises on storage failure; the caller reports it to the sender.
        """
        pass
