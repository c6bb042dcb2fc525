"""
In-process collaborators for local development and tests.
"""

from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple
import itertools
import logging

from triage_hub.services.collaborators.base import (
    AuthenticatedUser,
    MessageStore,
    SessionAuthenticator,
    StoredMessage,
)

logger = logging.getLogger(__name__)


class StaticTokenAuthenticator(SessionAuthenticator):
    """Authenticates against a fixed {token: (user_id, role)} table."""

    def __init__(self, tokens: Dict[str, Tuple[str, str]]):
        self.tokens = dict(tokens)

    def authenticate(self, token: Optional[str]) -> Optional[AuthenticatedUser]:
        if not token or token not in self.tokens:
            return None
        user_id, role = self.tokens[token]
        return AuthenticatedUser(user_id, role)


class InMemoryMessageStore(MessageStore):
    """Keeps messages in a list; nothing survives a restart."""

    def __init__(self):
        self.messages: List[StoredMessage] = []
        self._ids = itertools.count(1)
        self._lock = Lock()

    def save_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str = "text"
    ) -> StoredMessage:
        with self._lock:
            message = StoredMessage(
                message_id=str(next(self._ids)),
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                message_type=message_type,
                created_at=datetime.now(timezone.utc),
            )
            self.messages.append(message)
        return message
