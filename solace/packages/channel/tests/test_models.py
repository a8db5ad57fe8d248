"""入站消息标准化测试"""

from solace.channel import InboundMessage


class TestInboundMessage:
    def test_text_message(self):
        msg = InboundMessage.from_update(
            {"update_id": 5, "message": {"chat": {"id": 1001}, "text": "  /clear  "}}
        )
        assert msg.update_id == 5
        assert msg.chat_id == "1001"
        assert msg.content == "/clear"

    def test_edited_message(self):
        msg = InboundMessage.from_update(
            {"update_id": 6, "edited_message": {"chat": {"id": -42}, "text": "reply 1 hi"}}
        )
        assert msg.chat_id == "-42"
        assert msg.content == "reply 1 hi"

    def test_caption_used_when_text_missing(self):
        """语音消息通过 caption 发出指令"""
        msg = InboundMessage.from_update(
            {
                "update_id": 7,
                "message": {"chat": {"id": 1}, "voice": {"file_id": "v"}, "caption": "reply 9 ok"},
            }
        )
        assert msg.content == "reply 9 ok"

    def test_text_preferred_over_caption(self):
        msg = InboundMessage(update_id=1, text="text", caption="caption")
        assert msg.content == "text"

    def test_non_message_update(self):
        assert InboundMessage.from_update({"update_id": 8, "callback_query": {}}) is None

    def test_no_content(self):
        msg = InboundMessage.from_update(
            {"update_id": 9, "message": {"chat": {"id": 1}, "sticker": {}}}
        )
        assert msg.content == ""
