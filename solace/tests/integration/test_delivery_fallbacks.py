"""通知降级端到端集成测试

1. HTML 被拒 -> 纯文本重试
2. 上传音频后以 audio_url 提交 -> upload_local；file_id 失效 -> 改发文本
"""

from httpx import AsyncClient


class TestMarkupFallback:
    async def test_plain_text_retry(self, client: AsyncClient, fake_telegram, telegram_markup_error):
        fake_telegram.queue("sendMessage", telegram_markup_error())

        resp = await client.post("/grievances", json={"username": "bittu", "text": "<b>bold"})

        telegram = resp.json()["telegram"]
        assert telegram["ok"] is True
        assert telegram["markup_fallback"] is True
        first, retry = fake_telegram.payloads("sendMessage")
        assert first["parse_mode"] == "HTML"
        assert "parse_mode" not in retry


class TestMediaDelivery:
    async def test_upload_then_submit(self, client: AsyncClient, fake_telegram):
        uploaded = await client.post(
            "/upload-audio", files={"file": ("memo.ogg", b"OggS-data", "audio/ogg")}
        )
        audio_url = uploaded.json()["audio_url"]

        resp = await client.post(
            "/grievances", json={"username": "bittu", "text": "listen", "audio_url": audio_url}
        )

        telegram = resp.json()["telegram"]
        assert telegram["strategy"] == "upload_local"
        assert telegram["ok"] is True
        assert fake_telegram.methods() == ["sendVoice", "getFile"]

    async def test_missing_upload_sends_text(self, client: AsyncClient, fake_telegram):
        resp = await client.post(
            "/diary", json={"body": "listen", "audio_url": "/uploads/gone.ogg"}
        )

        telegram = resp.json()["telegram"]
        assert telegram["strategy"] == "text"
        assert telegram["ok"] is True
        assert fake_telegram.methods() == ["sendMessage"]

    async def test_stale_file_id_falls_back_to_text(self, client: AsyncClient, fake_telegram):
        failure = {"ok": False, "error_code": 400, "description": "Bad Request: wrong file identifier"}
        fake_telegram.queue("sendVoice", failure)
        fake_telegram.queue("sendAudio", failure)

        resp = await client.post(
            "/grievances",
            json={"username": "bittu", "text": "listen", "telegram_file_id": "stale"},
        )

        telegram = resp.json()["telegram"]
        assert telegram["ok"] is True
        assert telegram["text_fallback"] is True
        assert fake_telegram.methods() == ["sendVoice", "sendAudio", "sendMessage"]
