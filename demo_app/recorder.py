"""
File: recorder.py
Purpose: ASGI send facade that remembers the response status it forwarded.
"""

from typing import Any, Awaitable, Callable, MutableMapping

Message = MutableMapping[str, Any]
Send = Callable[[Message], Awaitable[None]]

DEFAULT_STATUS = 200


class StatusRecorder:
    """Wrap an ASGI `send` callable and record the status of `http.response.start`.

    Every message is forwarded unchanged, so the bytes on the wire are whatever
    the wrapped handler produced. Only the status value is copied on its way out.
    """

    def __init__(self, send: Send, default: int = DEFAULT_STATUS):
        self._send = send
        self._status = default
        self.started = False

    def set_status(self, code: int) -> None:
        # last write wins
        self._status = int(code)
        self.started = True

    def get_recorded_status(self) -> int:
        return self._status

    async def __call__(self, message: Message) -> None:
        if message.get("type") == "http.response.start":
            self.set_status(message.get("status", DEFAULT_STATUS))
        await self._send(message)
