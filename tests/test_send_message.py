"""
Reply producer loop tests.

The same use case drives a StreamSink and a CollectSink; history is kept
in memory.
"""

import pytest
from conftest import ScriptedProducer

from inboxstream.application.delivery import CollectSink, DeliveryContractError, StreamSink, decode_frames
from inboxstream.application.history import ConversationHistory
from inboxstream.application.use_cases.send_message import SendMessageUseCase
from inboxstream.domain.models import MessageRole


def _use_case(producer, history=None):
    return SendMessageUseCase(producer=producer, history=history or ConversationHistory())


class TestSendMessageStreaming:
    @pytest.mark.asyncio
    async def test_frames_follow_start_chunks_finish(self, transport):
        use_case = _use_case(ScriptedProducer(["He", "llo", " world"]))
        sink = StreamSink(transport, session_id="user-1")

        report = await use_case.run("user-1", "hi", sink)

        events = decode_frames("".join(transport.frames))
        assert [e.event for e in events] == ["start", "chunk", "chunk", "chunk", "finish"]
        assert [e.accumulated for e in events[1:4]] == ["He", "Hello", "Hello world"]
        assert events[0].session_id == "user-1"
        assert events[0].streaming is True
        assert report.ok
        assert report.text == "Hello world"
        assert transport.closed

    @pytest.mark.asyncio
    async def test_empty_deltas_are_skipped(self, transport):
        use_case = _use_case(ScriptedProducer(["a", "", "b"]))
        await use_case.run("u", "hi", StreamSink(transport, session_id="u"))

        chunks = [e for e in decode_frames("".join(transport.frames)) if e.event == "chunk"]
        assert [c.text for c in chunks] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_producer_failure_ends_with_single_error_frame(self, transport, log_records):
        use_case = _use_case(ScriptedProducer(["partial"], error=RuntimeError("rate limited")))

        report = await use_case.run("u", "hi", StreamSink(transport, session_id="u"))

        events = decode_frames("".join(transport.frames))
        assert [e.event for e in events] == ["start", "chunk", "error"]
        assert events[-1].message == "rate limited"
        assert not report.ok
        assert report.error == "rate limited"
        assert report.text == "partial"
        assert any(r["level"].name == "ERROR" for r in log_records)

    @pytest.mark.asyncio
    async def test_reused_sink_is_a_contract_error(self, transport):
        sink = StreamSink(transport, session_id="user-1")
        await _use_case(ScriptedProducer(["a"])).run("user-1", "hi", sink)

        with pytest.raises(DeliveryContractError):
            await _use_case(ScriptedProducer(["b"])).run("user-1", "again", sink)
        assert transport.close_calls == 1


    @pytest.mark.asyncio
    async def test_failed_start_writes_no_error_frame(self, log_records):
        class DroppedTransport:
            def __init__(self):
                self.attempts = []

            def write(self, frame):
                self.attempts.append(frame)
                raise ConnectionResetError("peer gone")

            def close(self):
                pass

        transport = DroppedTransport()
        sink = StreamSink(transport, session_id="user-1")

        report = await _use_case(ScriptedProducer(["never sent"])).run("user-1", "hi", sink)

        assert report.error == "peer gone"
        assert report.text == ""
        assert [a.split("\n", 1)[0] for a in transport.attempts] == ["event: start"]
        assert any("never started" in r["message"] for r in log_records)


class TestSendMessageCollect:
    @pytest.mark.asyncio
    async def test_collect_sink_holds_final_text(self):
        use_case = _use_case(ScriptedProducer(["Hel", "lo"]))
        sink = CollectSink()

        report = await use_case.run("u", "hi", sink)

        assert sink.get_full_text() == "Hello"
        assert report.text == "Hello"


class TestHistory:
    @pytest.mark.asyncio
    async def test_user_and_assistant_messages_recorded(self):
        history = ConversationHistory()
        producer = ScriptedProducer(["Hi!"])
        use_case = _use_case(producer, history)

        await use_case.run("u", "hello", CollectSink())

        messages = history.get_history("u")
        assert [(m.role, m.content) for m in messages] == [
            (MessageRole.USER, "hello"),
            (MessageRole.ASSISTANT, "Hi!"),
        ]
        # The producer saw the history including the new user message
        assert producer.seen_messages[-1].content == "hello"

    @pytest.mark.asyncio
    async def test_failed_reply_is_not_recorded(self):
        history = ConversationHistory()
        use_case = _use_case(ScriptedProducer([], error=ValueError("bad")), history)

        await use_case.run("u", "hello", CollectSink())

        assert [m.role for m in history.get_history("u")] == [MessageRole.USER]

    def test_history_is_trimmed_and_clearable(self):
        history = ConversationHistory(max_messages=3)
        for i in range(5):
            history.add_user_message("u", f"m{i}")

        assert [m.content for m in history.get_history("u")] == ["m2", "m3", "m4"]

        history.clear_history("u")
        assert history.get_history("u") == []
        assert history.get_history("someone-else") == []
