"""Channel 包测试 fixtures"""

import pytest


@pytest.fixture
def voice_file(tmp_path):
    """本地 OGG 语音文件"""
    path = tmp_path / "note.ogg"
    path.write_bytes(b"OggS\x00fake-voice")
    return path


@pytest.fixture
def mp3_file(tmp_path):
    """本地 MP3 文件"""
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3fake-mp3")
    return path
