"""In-memory registry of live socket connections, owned by one RealtimeGateway."""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Set


class ConnectionState(str, Enum):
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class Connection:
    connection_id: str
    state: ConnectionState = ConnectionState.CONNECTED
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    authenticated_at: Optional[datetime] = None
    subscriptions: Set[str] = field(default_factory=set)
    # Held while one event on this connection is handled and answered
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def authenticated(self) -> bool:
        return self.state == ConnectionState.AUTHENTICATED

    def mark_authenticated(self) -> None:
        self.state = ConnectionState.AUTHENTICATED
        self.authenticated_at = datetime.now(timezone.utc)

    def close(self) -> None:
        self.state = ConnectionState.CLOSED
        self.subscriptions.clear()


class ConnectionRegistry:
    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, connection_id: str) -> Connection:
        connection = Connection(connection_id=connection_id)
        self._connections[connection_id] = connection
        return connection

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def remove(self, connection_id: str) -> Optional[Connection]:
        connection = self._connections.pop(connection_id, None)
        if connection is not None:
            connection.close()
        return connection

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections
