from __future__ import annotations
from typing import Protocol


class DeliverySink(Protocol):
    def on_start(self, session_id: str, streaming: bool) -> None: ...
    def on_chunk(self, text: str, accumulated: str) -> None: ...
    def on_finish(self, complete: bool, session_id: str) -> None: ...
    def on_error(self, message: str) -> None: ...


class Transport(Protocol):
    # Ordered, write-once-per-event output channel
    def write(self, frame: str) -> None: ...
    def close(self) -> None: ...
