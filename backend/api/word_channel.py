"""Real-time word relay between the drill host and a paired display."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["word"])


class WordChannel:
    """Tracks connected websockets and pushes item ids to all of them."""

    def __init__(self) -> None:
        """Initialize an empty channel."""
        self.connections: set[WebSocket] = set()
        self.last_word: str | None = None

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.add(websocket)
        logger.info("Word client connected (%d total)", len(self.connections))
        if self.last_word is not None:
            await websocket.send_text(self.last_word)

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.discard(websocket)
        logger.info("Word client disconnected (%d left)", len(self.connections))

    async def broadcast(self, word: str) -> None:
        """Send ``word`` to every connected client."""
        self.last_word = word
        for websocket in list(self.connections):
            try:
                await websocket.send_text(word)
            except (WebSocketDisconnect, RuntimeError):
                logger.debug("Dropping closed word client")
                self.connections.discard(websocket)

    async def publish(self, word: str | None) -> None:
        """Broadcast ``word`` only if it differs from the last one sent."""
        if word is not None and word != self.last_word:
            await self.broadcast(word)


channel = WordChannel()


@router.websocket("/ws/word")
async def word_socket(websocket: WebSocket) -> None:
    """Relay every received word to all connected clients."""
    await channel.connect(websocket)
    try:
        while True:
            word = await websocket.receive_text()
            await channel.broadcast(word)
    except WebSocketDisconnect:
        pass
    finally:
        channel.disconnect(websocket)
