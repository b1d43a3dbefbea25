"""
Per-connection state machine for the game client's push channel.

    connected --authenticate(ok)--> authenticated
    connected | authenticated --disconnect--> closed (entry removed)

Handlers return the events to send back to that connection as (name, payload)
pairs; the transport emits them while still holding the connection lock, so one
connection is served strictly in arrival order.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Tuple

from app.config import settings
from app.core.exceptions import NotFoundError
from app.modules.auth.service import AuthService
from app.modules.groups.service import GroupService
from app.modules.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

Outbound = Tuple[str, dict]

AUTHENTICATED_EVENT = "authenticated"
ERROR_EVENT = "error"
GROUP_DATA_EVENT = "group-data"


def _error(message: str) -> Outbound:
    return ERROR_EVENT, {"success": False, "message": message}


def _group_id_from(payload: Any) -> Optional[str]:
    """Accept a bare id (the client's subscribe-group form) or {groupId} / {grupoId}"""
    if isinstance(payload, dict):
        payload = payload.get("groupId") or payload.get("grupoId")
    if isinstance(payload, (int, str)) and str(payload).strip():
        return str(payload).strip()
    return None


class RealtimeGateway:
    def __init__(
        self,
        auth_service_factory: Callable[[], AuthService],
        group_service_factory: Callable[[], GroupService],
        registry: Optional[ConnectionRegistry] = None
    ):
        self.auth_service_factory = auth_service_factory
        self.group_service_factory = group_service_factory
        self.registry = registry if registry is not None else ConnectionRegistry()

    @property
    def active_connections(self) -> int:
        return len(self.registry)

    @asynccontextmanager
    async def serialized(self, connection_id: str):
        """Hold the connection's lock; unknown connections run unguarded"""
        connection = self.registry.get(connection_id)
        if connection is None:
            yield
            return
        async with connection.lock:
            yield

    async def on_connect(self, connection_id: str) -> List[Outbound]:
        self.registry.register(connection_id)
        logger.info(f"Client connected: {connection_id}")
        return []

    async def on_authenticate(self, connection_id: str, payload: Any = None) -> List[Outbound]:
        connection = self.registry.get(connection_id)
        if connection is None:
            return [_error("Unknown connection")]
        presented_key = payload.get("apiKey") if isinstance(payload, dict) else None
        if not self.auth_service_factory().authenticate(presented_key):
            logger.info(f"Client {connection_id} failed authentication")
            return [_error("Authentication failed")]
        connection.mark_authenticated()
        logger.info(f"Client {connection_id} authenticated")
        return [(AUTHENTICATED_EVENT, {"success": True, "message": "Authenticated"})]

    async def on_subscribe(self, connection_id: str, payload: Any = None) -> List[Outbound]:
        """Push the current group view once; there is no follow-up change stream"""
        connection = self.registry.get(connection_id)
        if connection is None or not connection.authenticated:
            return [_error("Not authenticated")]
        group_id = _group_id_from(payload)
        if group_id is None:
            return [_error("groupId is required")]

        logger.info(f"Client {connection_id} subscribed to group {group_id}")
        try:
            view = await self.group_service_factory().assemble_group_view(group_id)
        except NotFoundError as e:
            return [_error(e.message)]
        except Exception as e:
            logger.exception(f"Failed to load group {group_id} for {connection_id}: {e}")
            return [_error("Internal server error" if settings.is_production else str(e))]

        # The client may have gone away while the view was loading
        if self.registry.get(connection_id) is connection:
            connection.subscriptions.add(group_id)
        return [(GROUP_DATA_EVENT, {
            "type": "initial",
            "groupId": group_id,
            "data": view.to_payload(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })]

    async def on_disconnect(self, connection_id: str) -> List[Outbound]:
        self.registry.remove(connection_id)
        logger.info(f"Client disconnected: {connection_id}")
        return []
