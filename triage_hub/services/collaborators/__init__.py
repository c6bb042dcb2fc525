"""
External collaborators of the real-time channel: handshake authentication
and private-message persistence.
"""

from typing import Tuple
import logging

from triage_hub.core.settings import Settings, settings as default_settings
from triage_hub.services.collaborators.base import (
    AuthenticatedUser,
    MessageStore,
    SessionAuthenticator,
    StoredMessage,
)
from triage_hub.services.collaborators.firestore import (
    FirestoreMessageStore,
    FirestoreSessionAuthenticator,
)
from triage_hub.services.collaborators.memory import InMemoryMessageStore, StaticTokenAuthenticator

logger = logging.getLogger(__name__)


def build_collaborators(settings: Settings = default_settings) -> Tuple[SessionAuthenticator, MessageStore]:
    """
    Pick collaborator implementations from settings.

    STORE_BACKEND=memory uses REALTIME_DEV_TOKENS and an in-process message
    list; anything else uses Firestore.
    """
    backend = (settings.STORE_BACKEND or "firestore").lower()
    if backend == "memory":
        logger.info("Collaborators: in-memory (development mode)")
        return StaticTokenAuthenticator(settings.dev_tokens()), InMemoryMessageStore()

    logger.info("Collaborators: firestore")
    return FirestoreSessionAuthenticator(), FirestoreMessageStore()


__all__ = [
    "AuthenticatedUser",
    "FirestoreMessageStore",
    "FirestoreSessionAuthenticator",
    "InMemoryMessageStore",
    "MessageStore",
    "SessionAuthenticator",
    "StaticTokenAuthenticator",
    "StoredMessage",
    "build_collaborators",
]
