import asyncio
import json


class FakeWebSocket:
    """Stands in for a starlette WebSocket; records every frame sent to it."""

    def __init__(self, fail: bool = False):
        self.frames = []
        self.fail = fail

    async def send_text(self, text: str):
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(json.loads(text))

    def events(self, name=None):
        return [f for f in self.frames if name is None or f["event"] == name]

    def last(self, name=None):
        matching = self.events(name)
        return matching[-1] if matching else None

    def clear(self):
        self.frames.clear()


def run(coro):
    return asyncio.run(coro)
