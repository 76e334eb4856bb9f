"""
Media probing via ffprobe.
"""
import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

FFPROBE_TIMEOUT = 60  # seconds


class MediaProbeError(Exception):
    """ffprobe could not report a duration for the file."""


def probe_duration(path: Path, ffprobe_path: Optional[str] = None) -> float:
    """
    Return the playback duration of a media file in seconds.

    Reads the audio stream duration when present, otherwise the container
    duration. Raises MediaProbeError when neither is available.
    """
    if ffprobe_path is None:
        from weaveit.config import config
        ffprobe_path = config.paths.ffprobe_path

    cmd = [
        ffprobe_path, "-v", "error",
        "-select_streams", "a:0",
        "-show_entries", "stream=duration:format=duration",
        "-of", "json",
        str(path),
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=FFPROBE_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise MediaProbeError(f"ffprobe failed to run: {e}") from e

    if result.returncode != 0:
        raise MediaProbeError(f"ffprobe exit {result.returncode}: {result.stderr.strip()[:200]}")

    try:
        data = json.loads(result.stdout or "{}")
    except ValueError as e:
        raise MediaProbeError(f"Unparseable ffprobe output: {e}") from e

    candidates = [s.get("duration") for s in data.get("streams", [])]
    candidates.append(data.get("format", {}).get("duration"))

    for value in candidates:
        if value in (None, "N/A"):
            continue
        try:
            duration = float(value)
        except (TypeError, ValueError):
            continue
        if duration > 0:
            logger.debug(f"Probed {Path(path).name}: {duration:.3f}s")
            return duration

    raise MediaProbeError(f"No duration reported for {path}")
