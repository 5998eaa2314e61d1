"""Delivery sinks: one producer, interchangeable output targets."""

from inboxstream.application.delivery.frames import decode_frames, encode_frame
from inboxstream.application.delivery.sinks import (
    CollectSink,
    ConsoleSink,
    DeliveryContractError,
    StreamSink,
)

__all__ = [
    "StreamSink",
    "CollectSink",
    "ConsoleSink",
    "DeliveryContractError",
    "encode_frame",
    "decode_frames",
]
