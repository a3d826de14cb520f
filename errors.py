from typing import Optional


class WatchPartyError(Exception):
    """Base for errors reported back to the connection that caused them."""

    kind = "WatchPartyError"

    def __init__(self, message: str, event: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.event = event

    def to_payload(self) -> dict:
        return {"kind": self.kind, "message": self.message, "event": self.event}


class RoomNotFound(WatchPartyError):
    kind = "RoomNotFound"


class InvalidAction(WatchPartyError):
    kind = "InvalidAction"


class InvalidPayload(WatchPartyError):
    kind = "InvalidPayload"


class UnknownEvent(WatchPartyError):
    kind = "UnknownEvent"
