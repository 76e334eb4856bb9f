"""
Application Configuration - Environment Variable Management.
Loads and validates configuration from .env file.
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
    logger.info(f"Loaded environment from {ENV_FILE}")
else:
    logger.debug(f".env file not found at {ENV_FILE}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}={raw!r}, using {default}")
        return default


@dataclass
class AIConfig:
    """Language-generation backend configuration."""
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    llm_provider: str = "openai"
    timeout_seconds: float = 120.0
    max_tokens: int = 1200

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key and not self.openai_api_key.startswith("PASTE_"))


@dataclass
class VoiceConfig:
    """Speech synthesis configuration."""
    provider: str = "auto"  # auto | openai | edge
    openai_tts_model: str = "tts-1"
    openai_tts_voice: str = "alloy"
    edge_voice: str = "en-US-GuyNeural"
    edge_rate: str = "+0%"
    timeout_seconds: float = 180.0


@dataclass
class RenderConfig:
    """Scrolling-script video settings."""
    width: int = 1280
    height: int = 720
    fps: int = 30
    font_path: Optional[str] = None
    font_size: int = 36
    line_spacing: int = 12
    padding_x: int = 80
    padding_y: int = 60
    text_color: str = "#E2E8F0"
    background_color: str = "#0F172A"
    min_video_seconds: float = 1.0
    readable_pixels_per_second: float = 120.0
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    preset: str = "medium"
    threads: int = 4


@dataclass
class PipelineLimits:
    """Bounded concurrency around the resource-heavy stages."""
    max_concurrent_synthesis: int = 4
    max_concurrent_renders: int = 2


@dataclass
class PathsConfig:
    """File system paths configuration."""
    content_dir: Path
    ffmpeg_path: str
    ffprobe_path: str

    @classmethod
    def detect(cls) -> "PathsConfig":
        """Auto-detect paths based on environment and system."""
        # Content store - use project root/data/output by default
        content_dir = Path(os.getenv("CONTENT_DIR", str(PROJECT_ROOT / "data" / "output")))
        content_dir.mkdir(parents=True, exist_ok=True)

        return cls(
            content_dir=content_dir,
            ffmpeg_path=cls._find_ffmpeg(),
            ffprobe_path=cls._find_ffprobe(),
        )

    @staticmethod
    def _find_ffmpeg() -> str:
        """Find FFmpeg executable."""
        env_path = os.getenv("FFMPEG_PATH")
        if env_path and os.path.exists(env_path):
            return env_path

        for path in ("/usr/bin/ffmpeg", "/usr/local/bin/ffmpeg", "/opt/homebrew/bin/ffmpeg"):
            if os.path.exists(path):
                return path

        # Try imageio-ffmpeg
        try:
            import imageio_ffmpeg
            return imageio_ffmpeg.get_ffmpeg_exe()
        except (ImportError, RuntimeError):
            pass

        # Fallback to system PATH
        return "ffmpeg"

    @staticmethod
    def _find_ffprobe() -> str:
        """Find FFprobe executable."""
        env_path = os.getenv("FFPROBE_PATH")
        if env_path and os.path.exists(env_path):
            return env_path

        for path in ("/usr/bin/ffprobe", "/usr/local/bin/ffprobe", "/opt/homebrew/bin/ffprobe"):
            if os.path.exists(path):
                return path

        # imageio-ffmpeg ships only ffmpeg, but some installs place ffprobe beside it
        try:
            import imageio_ffmpeg
            ffmpeg_path = imageio_ffmpeg.get_ffmpeg_exe()
            ffprobe_path = os.path.join(os.path.dirname(ffmpeg_path), "ffprobe")
            if os.path.exists(ffprobe_path):
                return ffprobe_path
        except (ImportError, RuntimeError):
            pass

        return "ffprobe"


@dataclass
class AppConfig:
    """Main Application Configuration."""
    ai: AIConfig
    voice: VoiceConfig
    render: RenderConfig
    paths: PathsConfig
    limits: PipelineLimits = field(default_factory=PipelineLimits)
    public_base_path: str = "/api/content"
    debug: bool = False

    def __post_init__(self):
        if self.limits.max_concurrent_synthesis < 1 or self.limits.max_concurrent_renders < 1:
            raise ValueError("Concurrency limits must be at least 1")
        if self.render.fps < 1:
            raise ValueError("VIDEO_FPS must be at least 1")

    def validate(self) -> dict:
        """Validate configuration and return status."""
        return {
            "ai": {
                "provider": self.ai.llm_provider,
                "openai_configured": self.ai.has_openai,
                "model": self.ai.openai_model,
            },
            "voice": {
                "provider": self.voice.provider,
                "openai_configured": self.ai.has_openai,
            },
            "render": {
                "resolution": f"{self.render.width}x{self.render.height}",
                "fps": self.render.fps,
            },
            "limits": {
                "max_concurrent_synthesis": self.limits.max_concurrent_synthesis,
                "max_concurrent_renders": self.limits.max_concurrent_renders,
            },
            "ready_for_generation": self.ai.has_openai,
        }

    def log_status(self):
        """Log configuration status (without exposing keys)."""
        status = self.validate()

        logger.info("=" * 50)
        logger.info("Configuration Status:")
        logger.info(f"  OpenAI API: {'OK' if status['ai']['openai_configured'] else 'NOT CONFIGURED'}")
        logger.info(f"  LLM model: {status['ai']['model']}")
        logger.info(f"  Voice provider: {status['voice']['provider']}")
        logger.info(f"  Render: {status['render']['resolution']}@{status['render']['fps']}fps")
        logger.info(f"  Content Dir: {self.paths.content_dir}")
        logger.info(f"  FFmpeg: {self.paths.ffmpeg_path}")
        logger.info(f"  FFprobe: {self.paths.ffprobe_path}")
        logger.info("=" * 50)

        if not status["ready_for_generation"]:
            logger.warning("OPENAI_API_KEY not set - script enhancement will fail")


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    ai_config = AIConfig(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        llm_provider=os.getenv("LLM_PROVIDER", "openai"),
        timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", 120.0),
        max_tokens=_env_int("LLM_MAX_TOKENS", 1200),
    )

    voice_config = VoiceConfig(
        provider=os.getenv("TTS_PROVIDER", "auto").lower(),
        openai_tts_model=os.getenv("OPENAI_TTS_MODEL", "tts-1"),
        openai_tts_voice=os.getenv("OPENAI_TTS_VOICE", "alloy"),
        edge_voice=os.getenv("TTS_EDGE_VOICE", "en-US-GuyNeural"),
        edge_rate=os.getenv("TTS_EDGE_RATE", "+0%"),
        timeout_seconds=_env_float("TTS_TIMEOUT_SECONDS", 180.0),
    )

    render_config = RenderConfig(
        width=_env_int("VIDEO_WIDTH", 1280),
        height=_env_int("VIDEO_HEIGHT", 720),
        fps=_env_int("VIDEO_FPS", 30),
        font_path=os.getenv("VIDEO_FONT_PATH") or None,
        font_size=_env_int("VIDEO_FONT_SIZE", 36),
        text_color=os.getenv("VIDEO_TEXT_COLOR", "#E2E8F0"),
        background_color=os.getenv("VIDEO_BACKGROUND_COLOR", "#0F172A"),
        min_video_seconds=_env_float("MIN_VIDEO_SECONDS", 1.0),
        preset=os.getenv("VIDEO_PRESET", "medium"),
    )

    limits = PipelineLimits(
        max_concurrent_synthesis=_env_int("MAX_CONCURRENT_SYNTHESIS", 4),
        max_concurrent_renders=_env_int("MAX_CONCURRENT_RENDERS", 2),
    )

    return AppConfig(
        ai=ai_config,
        voice=voice_config,
        render=render_config,
        paths=PathsConfig.detect(),
        limits=limits,
        public_base_path=os.getenv("PUBLIC_BASE_PATH", "/api/content").rstrip("/"),
        debug=os.getenv("DEBUG", "false").lower() == "true",
    )


# Global config instance
config = load_config()
