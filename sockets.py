from collections import defaultdict
from typing import Dict, List
from fastapi import WebSocket

class ConnectionManager:
    """Tracks open live-list sockets per collection."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = defaultdict(list)

    async def connect(self, websocket: WebSocket, collection: str):
        await websocket.accept()
        self.active_connections[collection].append(websocket)

    def disconnect(self, websocket: WebSocket, collection: str):
        if websocket in self.active_connections[collection]:
            self.active_connections[collection].remove(websocket)

    def count(self, collection: str = None) -> int:
        if collection is not None:
            return len(self.active_connections[collection])
        return sum(len(c) for c in self.active_connections.values())

# Global instance
manager = ConnectionManager()
