"""Use case for producing a reply and delivering it through a sink."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from inboxstream.application.delivery.sinks import DeliveryContractError
from inboxstream.application.history import ConversationHistory
from inboxstream.application.ports.delivery_sink import DeliverySink
from inboxstream.application.ports.reply_producer import ReplyProducer


@dataclass(frozen=True)
class DeliveryReport:
    """What the producer managed to deliver."""

    text: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SendMessageUseCase:
    """
    Generate a reply to a user message and feed it to a delivery sink.

    Flow:
    1. Record the user message in history
    2. Signal start on the sink
    3. Stream deltas, passing each one with the running text
    4. Record the reply and signal finish
    5. On failure after start, signal error instead of finish
    """

    def __init__(self, producer: ReplyProducer, history: ConversationHistory) -> None:
        self.producer = producer
        self.history = history

    async def run(self, session_id: str, message: str, sink: DeliverySink) -> DeliveryReport:
        self.history.add_user_message(session_id, message)
        messages = self.history.get_history(session_id)

        chunks: list[str] = []
        accumulated = ""
        started = False
        try:
            sink.on_start(session_id, True)
            started = True
            async for text in self.producer.stream(messages):
                if not text:
                    continue
                chunks.append(text)
                accumulated = "".join(chunks)
                sink.on_chunk(text, accumulated)

            self.history.add_assistant_message(session_id, accumulated)
            sink.on_finish(True, session_id)
            logger.info(f"Reply for {session_id} delivered ({len(chunks)} chunks, {len(accumulated)} chars)")
            return DeliveryReport(text=accumulated)

        except DeliveryContractError:
            raise
        except Exception as e:
            logger.exception(f"Error generating reply for {session_id}: {e}")
            error_message = str(e) or e.__class__.__name__
            if not started:
                logger.warning(f"Delivery for {session_id} never started, error not delivered")
            elif getattr(sink, "closed", False):
                logger.warning(f"Sink for {session_id} already closed, error not delivered")
            else:
                sink.on_error(error_message)
            return DeliveryReport(text=accumulated, error=error_message)
