"""
Room Registry - live real-time sessions and their room memberships.

DESIGN PRINCIPLES:
- One registry instance per application (or per test), no module global
- session_id -> Session and room_key -> {session_id} are updated together
  under one lock, so the two indexes never disagree
- The lock is never held across an await; every operation is a short,
  synchronous critical section usable from threads and coroutines alike
- Joining twice and leaving twice are no-ops
"""

from threading import Lock
from typing import Any, Dict, FrozenSet, List, Set
import logging

logger = logging.getLogger(__name__)

ADMINS_ROOM = "admins"
ADMIN_ROLES = {"ADMIN", "MODERATOR"}


def user_room(user_id) -> str:
    return f"user-{user_id}"


def role_room(role: str) -> str:
    return role.lower()


def request_room(request_id) -> str:
    return f"request-{request_id}"


def chat_room(chat_id) -> str:
    return f"chat-{chat_id}"


class RegistryError(Exception):
    """Base class for room registry errors."""


class DuplicateSession(RegistryError):
    """A session with this id is already registered."""


class UnknownSession(RegistryError):
    """No session with this id is registered."""


class Session:
    """
    One authenticated, live real-time connection.

    `transport` is whatever delivers frames to the client; the dispatcher
    only needs it to provide `async send_json(message)`.
    """

    def __init__(self, session_id: str, user_id: str, role: str, transport: Any = None):
        self.session_id = session_id
        self.user_id = user_id
        self.role = role
        self.transport = transport
        self.room_memberships: Set[str] = set()

    def to_dict(self) -> Dict:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "role": self.role,
        }

    def __repr__(self) -> str:
        return f"Session({self.session_id!r}, user={self.user_id!r}, role={self.role!r})"


class RoomRegistry:
    """Index of live sessions and the rooms they belong to."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._lock = Lock()

    def register(self, session_id: str, user_id, role: str, transport: Any = None) -> Session:
        """
        Create a session and join its default rooms.

        Every session joins user-<user_id> and its lower-cased role room;
        ADMIN and MODERATOR sessions also join `admins`.

        Raises:
            DuplicateSession: session_id is already registered
        """
        user_id = str(user_id)
        role = (role or "").upper()
        session = Session(session_id, user_id, role, transport)

        default_rooms = [user_room(user_id), role_room(role)]
        if role in ADMIN_ROLES:
            default_rooms.append(ADMINS_ROOM)

        with self._lock:
            if session_id in self._sessions:
                raise DuplicateSession(f"Session {session_id} is already registered")
            self._sessions[session_id] = session
            for room_key in default_rooms:
                self._add_member(session, room_key)

        logger.info(f"Session registered: {session_id} (user {user_id}, role {role})")
        return session

    def join_room(self, session_id: str, room_key: str) -> bool:
        """
        Add a session to a room.

        Returns:
            True if the session is a member afterwards, False if the session
            is not registered (e.g. it disconnected meanwhile)
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.debug(f"Ignoring join of {room_key} for unknown session {session_id}")
                return False
            self._add_member(session, room_key)

        logger.debug(f"Session {session_id} joined room {room_key}")
        return True

    def join_request(self, session_id: str, request_id) -> bool:
        return self.join_room(session_id, request_room(request_id))

    def join_chat(self, session_id: str, chat_id) -> bool:
        return self.join_room(session_id, chat_room(chat_id))

    def deregister(self, session_id: str) -> bool:
        """
        Remove a session from all its rooms and forget it.

        Returns:
            True if a session was removed, False if it was already gone
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            for room_key in session.room_memberships:
                members = self._rooms.get(room_key)
                if members is None:
                    continue
                members.discard(session_id)
                if not members:
                    del self._rooms[room_key]
            session.room_memberships.clear()

        logger.info(f"Session deregistered: {session_id} (user {session.user_id})")
        return True

    def members_of(self, room_key: str) -> FrozenSet[str]:
        """Snapshot of the session ids in a room; empty if nobody is in it."""
        with self._lock:
            return frozenset(self._rooms.get(room_key, ()))

    def sessions_in(self, room_key: str) -> List[Session]:
        """Snapshot of the Session objects in a room."""
        with self._lock:
            return [self._sessions[sid] for sid in self._rooms.get(room_key, ())]

    def get_session(self, session_id: str) -> Session:
        """
        Raises:
            UnknownSession: session_id is not registered
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(f"Session {session_id} is not registered")
        return session

    def rooms_of(self, session_id: str) -> FrozenSet[str]:
        """Rooms a session belongs to; empty if the session is unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
            return frozenset(session.room_memberships) if session else frozenset()

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def _add_member(self, session: Session, room_key: str) -> None:
        # Caller holds self._lock
        session.room_memberships.add(room_key)
        self._rooms.setdefault(room_key, set()).add(session.session_id)

