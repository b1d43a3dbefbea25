"""Socket.IO transport for the realtime gateway."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Optional

import socketio

from app.modules.realtime.gateway import Outbound, RealtimeGateway


class GroupsNamespace(socketio.AsyncNamespace):
    """Default namespace; relays socket events to the gateway and emits its replies."""

    def __init__(self, gateway: RealtimeGateway, namespace: str = "/") -> None:
        super().__init__(namespace)
        self.gateway = gateway

    async def trigger_event(self, event: str, *args):
        # "subscribe-group" is not a valid method name
        return await super().trigger_event(event.replace("-", "_"), *args)

    async def _relay(
        self,
        sid: str,
        handler: Callable[[str, Any], Awaitable[List[Outbound]]],
        payload: Any
    ) -> None:
        async with self.gateway.serialized(sid):
            for event, data in await handler(sid, payload):
                await self.emit(event, data, room=sid)

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
        await self.gateway.on_connect(sid)

    async def on_authenticate(self, sid: str, payload: Any = None) -> None:
        await self._relay(sid, self.gateway.on_authenticate, payload)

    async def on_subscribe(self, sid: str, payload: Any = None) -> None:
        await self._relay(sid, self.gateway.on_subscribe, payload)

    async def on_subscribe_group(self, sid: str, payload: Any = None) -> None:
        await self._relay(sid, self.gateway.on_subscribe, payload)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        await self.gateway.on_disconnect(sid)
