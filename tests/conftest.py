"""
Pytest configuration and fixtures for WeaveIt tests.
"""
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Set test environment before importing weaveit modules
_CONTENT_DIR = tempfile.mkdtemp(prefix="weaveit-test-content-")
os.environ["CONTENT_DIR"] = _CONTENT_DIR
os.environ["DEBUG"] = "true"
os.environ["TTS_PROVIDER"] = "edge"
os.environ.pop("OPENAI_API_KEY", None)

from weaveit.providers.llm import BaseLLMProvider  # noqa: E402
from weaveit.providers.voice import BaseVoiceProvider  # noqa: E402
from weaveit.rendering.models import RenderResult  # noqa: E402

FAKE_MP3 = b"ID3\x03\x00\x00\x00\x00\x00\x00" + b"\xff\xfb\x90\x64" * 256
FAKE_MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 512


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_CONTENT_DIR, ignore_errors=True)


class FakeLLMProvider(BaseLLMProvider):
    """Returns canned narration, or raises a preset error."""

    def __init__(self, narration: str = "This script prints a greeting.", error: Exception = None):
        self.narration = narration
        self.error = error
        self.calls = []

    @property
    def name(self) -> str:
        return "fake-llm"

    @property
    def is_available(self) -> bool:
        return True

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.narration


class FakeVoiceProvider(BaseVoiceProvider):
    """Writes fixed bytes instead of speech."""

    def __init__(self, payload: bytes = FAKE_MP3, error: Exception = None):
        self.payload = payload
        self.error = error
        self.calls = []

    @property
    def name(self) -> str:
        return "fake-voice"

    @property
    def is_available(self) -> bool:
        return True

    async def synthesize(self, text: str, output_path: Path) -> Path:
        self.calls.append(text)
        if self.error:
            raise self.error
        Path(output_path).write_bytes(self.payload)
        return output_path


class FakeRenderer:
    """Stands in for ScrollingScriptRenderer; writes a placeholder MP4."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    async def render_async(self, script, audio_path, duration_seconds, output_path, content_id=None):
        self.calls.append(
            {
                "script": script,
                "audio_path": Path(audio_path),
                "audio_existed": Path(audio_path).exists(),
                "duration_seconds": duration_seconds,
                "output_path": Path(output_path),
            }
        )
        if self.error:
            raise self.error
        Path(output_path).write_bytes(FAKE_MP4)
        return RenderResult(
            output_path=output_path,
            duration_seconds=max(duration_seconds, 1.0),
            total_scroll=0,
            velocity=0,
            fps=30,
            resolution="1280x720",
            line_count=1,
        )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    from weaveit.persistence import ContentStore
    return ContentStore(temp_dir / "content")


@pytest.fixture
def sample_script():
    """Sample author script for testing."""
    return (
        "def greet(name):\n"
        "    return f\"Hello, {name}!\"\n"
        "\n"
        "print(greet(\"world\"))\n"
    )


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def fake_voice():
    return FakeVoiceProvider()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fixed_probe(monkeypatch):
    """Make ffprobe report 12.5 seconds for any file."""
    probe = MagicMock(return_value=12.5)
    monkeypatch.setattr("weaveit.services.speech_synthesizer.probe_duration", probe)
    return probe


@pytest.fixture
def orchestrator(store, fake_llm, fake_voice, fake_renderer, fixed_probe):
    from weaveit.orchestration import JobOrchestrator
    from weaveit.services import ScriptEnhancer, SpeechSynthesizer

    return JobOrchestrator(
        store=store,
        enhancer=ScriptEnhancer(provider=fake_llm),
        synthesizer=SpeechSynthesizer(provider=fake_voice, ffprobe_path="ffprobe"),
        renderer=fake_renderer,
        max_concurrent_synthesis=2,
        max_concurrent_renders=1,
    )


# FastAPI test client fixture
@pytest.fixture
def mock_orchestrator():
    orchestrator = MagicMock()
    orchestrator.submit = MagicMock()
    return orchestrator


@pytest.fixture
def test_client(store, mock_orchestrator):
    """Create a test client wired to a temporary store and a mock orchestrator."""
    from fastapi.testclient import TestClient

    from weaveit.api.dependencies import get_orchestrator, get_status_poller, get_store
    from weaveit.api.main import create_app
    from weaveit.orchestration import StatusPoller

    app = create_app(debug=True)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_status_poller] = lambda: StatusPoller(store=store, public_base_path="/api/content")
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    return TestClient(app)


@pytest.fixture
def make_llm():
    return FakeLLMProvider


@pytest.fixture
def make_voice():
    return FakeVoiceProvider


@pytest.fixture
def make_renderer():
    return FakeRenderer
