import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from scriptgenie.config import Settings
from scriptgenie.main import create_app
from scriptgenie.services.ai_service import AIProcessor
from scriptgenie.services.file_service import FileProcessor

SCRIPT_FIELDS = {
    "title": "Productivity Tips That Actually Work",
    "description": "Productivity tips for beginners. Learn five habits in ten minutes.",
    "script": "HOOK: Want two extra hours a day? Section 1... Watch [RELATED_VIDEO_TITLE] next.",
    "short_script": "Two extra hours a day? Here is how.",
}

AUDIO_BYTES = b"ID3\x03\x00fake-mp3-payload"


class FakeChat:
    def __init__(self, content=None, error=None):
        self.content = json.dumps(SCRIPT_FIELDS) if content is None else content
        self.error = error
        self.calls = []

    async def complete_async(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeMistral:
    def __init__(self, content=None, error=None):
        self.chat = FakeChat(content, error)


class FakeTextToSpeech:
    def __init__(self, audio=AUDIO_BYTES, error=None):
        self.audio = audio
        self.error = error
        self.calls = []

    def convert(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        # The SDK streams the payload in chunks
        return iter([self.audio[:4], self.audio[4:]])


class FakeElevenLabs:
    def __init__(self, audio=AUDIO_BYTES, error=None):
        self.text_to_speech = FakeTextToSpeech(audio, error)


def make_settings(tmp_path, **overrides):
    values = {
        "MISTRAL_API_KEY": "test-mistral",
        "ELEVEN_API_KEY": "test-eleven",
        "PUBLIC_DIR": tmp_path / "public",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def mistral():
    return FakeMistral()


@pytest.fixture
def elevenlabs():
    return FakeElevenLabs()


@pytest.fixture
def ai_processor(settings, mistral, elevenlabs):
    return AIProcessor(
        settings,
        file_processor=FileProcessor(settings.output_dir),
        mistral_client=mistral,
        elevenlabs_client=elevenlabs,
    )


@pytest.fixture
def client(settings, ai_processor):
    (settings.PUBLIC_DIR / "index.html").write_text("<h1>ScriptGenie Pro</h1>")
    return TestClient(create_app(settings, ai_processor=ai_processor))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DEMO_MODE", "CMI_MERCHANT_ID", "PORT", "MISTRAL_MODEL", "ELEVEN_MODEL", "ELEVEN_VOICE_ID"):
        monkeypatch.delenv(name, raising=False)
