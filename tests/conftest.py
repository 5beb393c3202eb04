from types import SimpleNamespace

import pytest

from vid2sub import gemini
from vid2sub.config import Config


class FakeCompletions:
    """Stands in for client.chat.completions; replays canned replies in order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Every test gets its own output dir, a dummy key and a fresh client."""
    monkeypatch.setattr(Config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(Config, "OUT_DIR", tmp_path / "out")
    monkeypatch.setattr(Config, "MAX_RETRIES", 2)
    monkeypatch.setattr(gemini, "_client", None)


@pytest.fixture
def fake_completions(monkeypatch: pytest.MonkeyPatch):
    """Install a fake client whose completions return the given replies."""

    def install(*replies) -> FakeCompletions:
        completions = FakeCompletions(replies)
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        monkeypatch.setattr(gemini, "_client", client)
        return completions

    return install


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path
