"""指令解析测试 -- parse_command 为纯函数"""

import pytest
from solace.channel import InboundMessage
from solace.core.models import CommandKind
from solace.gateway.services.command_interpreter import parse_command


def _msg(text: str | None = None, caption: str | None = None) -> InboundMessage:
    return InboundMessage(update_id=1, chat_id="1001", text=text, caption=caption)


class TestParseCommand:
    @pytest.mark.parametrize(
        ("text", "kind"),
        [
            ("/clear", CommandKind.CLEAR_REQUEST),
            ("/CLEAR now", CommandKind.CLEAR_REQUEST),
            ("/confirm_clear", CommandKind.CLEAR_CONFIRM),
            ("/Confirm_Clear please", CommandKind.CLEAR_CONFIRM),
            ("delete_diary 01JABC", CommandKind.DELETE_DIARY),
            ("reply 42 thanks", CommandKind.RECORD_REPLY),
            ("hello there", CommandKind.UNRECOGNIZED),
            ("/clearance", CommandKind.UNRECOGNIZED),
            ("delete_diary", CommandKind.UNRECOGNIZED),
        ],
    )
    def test_classification(self, text, kind):
        assert parse_command(_msg(text)).kind == kind

    def test_reply_extracts_target_and_trimmed_text(self):
        command = parse_command(_msg("REPLY 01JXYZ   we fixed it  "))
        assert command.target_id == "01JXYZ"
        assert command.reply_text == "we fixed it"
        assert command.sender_id == "1001"

    def test_reply_text_spans_lines(self):
        command = parse_command(_msg("reply 7 line one\nline two"))
        assert command.reply_text == "line one\nline two"

    @pytest.mark.parametrize(
        "text",
        ["id 99 noted", "id:99 noted", "id#99 noted", "ID: 99 noted", "id# 99 noted"],
    )
    def test_id_aliases(self, text):
        command = parse_command(_msg(text))
        assert command.kind == CommandKind.RECORD_REPLY
        assert command.target_id == "99"
        assert command.reply_text == "noted"

    @pytest.mark.parametrize("text", ["idea for later", "identity crisis here"])
    def test_words_starting_with_id_not_replies(self, text):
        assert parse_command(_msg(text)).kind == CommandKind.UNRECOGNIZED

    def test_reply_without_text_unrecognized(self):
        assert parse_command(_msg("reply 42")).kind == CommandKind.UNRECOGNIZED

    def test_delete_diary_target(self):
        assert parse_command(_msg("delete_diary abc123 extra")).target_id == "abc123"

    def test_caption_used_when_text_absent(self):
        command = parse_command(_msg(caption="reply 5 voice reply"))
        assert command.kind == CommandKind.RECORD_REPLY
        assert command.reply_text == "voice reply"

    def test_clear_has_priority_over_reply(self):
        assert parse_command(_msg("/clear reply 1 x")).kind == CommandKind.CLEAR_REQUEST
