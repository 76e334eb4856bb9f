"""
Scrolling-script video renderer.

Renders the original script as a column of text that scrolls at constant
speed for exactly the narration's duration, with the narration muxed in.
"""
import asyncio
import logging
import tempfile
import time
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from moviepy import AudioFileClip, CompositeAudioClip, VideoClip

from weaveit.exceptions import RenderFailed

from .layout import ColumnStyle, ScriptColumn
from .models import DisplayScript, RenderResult, ScrollSchedule

logger = logging.getLogger(__name__)


class ScrollingScriptRenderer:
    """
    Production renderer for scrolling-script videos (1280x720 by default).

    Pipeline:
    1. Wrap and rasterize the script into one tall column
    2. Build a constant-velocity scroll schedule from the audio duration
    3. Cut frames out of the column by offset
    4. Mux narration audio and export H.264/AAC MP4
    """

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        fps: int = 30,
        style: Optional[ColumnStyle] = None,
        min_duration: float = 1.0,
        readable_pixels_per_second: float = 120.0,
        video_codec: str = "libx264",
        audio_codec: str = "aac",
        audio_bitrate: str = "192k",
        preset: str = "medium",
        threads: int = 4,
    ):
        self.width = width
        self.height = height
        self.fps = fps
        self.style = replace(style or ColumnStyle(), width=width, viewport_height=height)
        self.min_duration = min_duration
        self.readable_pixels_per_second = readable_pixels_per_second
        self.video_codec = video_codec
        self.audio_codec = audio_codec
        self.audio_bitrate = audio_bitrate
        self.preset = preset
        self.threads = threads

        logger.info(
            f"ScrollingScriptRenderer initialized: {width}x{height}@{fps}fps, "
            f"codec={video_codec}, preset={preset}"
        )

    @classmethod
    def from_config(cls, render_config=None) -> "ScrollingScriptRenderer":
        if render_config is None:
            from weaveit.config import config

            render_config = config.render

        style = ColumnStyle(
            font_path=render_config.font_path,
            font_size=render_config.font_size,
            line_spacing=render_config.line_spacing,
            padding_x=render_config.padding_x,
            padding_y=render_config.padding_y,
            text_color=render_config.text_color,
            background_color=render_config.background_color,
        )
        return cls(
            width=render_config.width,
            height=render_config.height,
            fps=render_config.fps,
            style=style,
            min_duration=render_config.min_video_seconds,
            readable_pixels_per_second=render_config.readable_pixels_per_second,
            video_codec=render_config.video_codec,
            audio_codec=render_config.audio_codec,
            preset=render_config.preset,
            threads=render_config.threads,
        )

    def _close_clips(self, *clips) -> None:
        """Safely close video/audio clips."""
        for clip in clips:
            if clip is not None:
                try:
                    clip.close()
                except Exception as e:
                    logger.warning(f"Error closing clip: {e}")

    def _coerce_script(self, script: Union[DisplayScript, str, bytes], content_id: Optional[str]) -> DisplayScript:
        if isinstance(script, DisplayScript):
            return script
        try:
            return DisplayScript.from_raw(script)
        except UnicodeDecodeError as e:
            raise RenderFailed(f"Script is not valid UTF-8: {e}", content_id=content_id, cause=e) from e
        except ValueError as e:
            raise RenderFailed(f"Script cannot be displayed: {e}", content_id=content_id, cause=e) from e

    def schedule_for(self, column: ScriptColumn, duration_seconds: float) -> ScrollSchedule:
        return ScrollSchedule.build(
            content_height=column.content_height,
            viewport_height=self.height,
            duration=duration_seconds,
            fps=self.fps,
            min_duration=self.min_duration,
        )

    def _fit_audio(self, audio: AudioFileClip, duration: float):
        """Trim or pad the narration so it spans exactly `duration`."""
        if audio.duration is None or audio.duration > duration:
            return audio.subclipped(0, duration)
        if audio.duration < duration:
            # Silence after the narration when the video was clamped up
            return CompositeAudioClip([audio]).with_duration(duration)
        return audio

    def render(
        self,
        script: Union[DisplayScript, str, bytes],
        audio_path: Union[str, Path],
        duration_seconds: float,
        output_path: Union[str, Path],
        content_id: Optional[str] = None,
    ) -> RenderResult:
        """
        Render the scrolling script with narration into `output_path`.

        `output_path` should be a staging path; it is deleted again if the
        render fails.

        Raises:
            RenderFailed: unreadable audio, undrawable text or encoder error
        """
        start_time = time.time()
        log_prefix = f"[{content_id}] " if content_id else ""
        output_path = Path(output_path)
        audio_path = Path(audio_path)

        display = self._coerce_script(script, content_id)

        if not audio_path.is_file():
            raise RenderFailed(f"Narration audio not found: {audio_path}", content_id=content_id)
        if duration_seconds is None or duration_seconds <= 0:
            raise RenderFailed(f"Invalid narration duration: {duration_seconds}", content_id=content_id)

        audio = None
        fitted_audio = None
        video = None

        try:
            column = ScriptColumn(display, self.style)
            pixels = column.rasterize()
            schedule = self.schedule_for(column, duration_seconds)

            exceeds = schedule.exceeds_readable_speed(self.readable_pixels_per_second)
            if exceeds:
                logger.warning(
                    f"{log_prefix}Scroll speed {schedule.velocity:.0f}px/s exceeds readable "
                    f"{self.readable_pixels_per_second:.0f}px/s ({len(column.lines)} lines in {schedule.duration:.1f}s)"
                )

            logger.info(
                f"{log_prefix}Rendering {len(column.lines)} lines, scroll={schedule.total_scroll:.0f}px "
                f"over {schedule.duration:.2f}s ({schedule.velocity:.1f}px/s)"
            )

            height = self.height

            def frame_function(t):
                y = int(round(schedule.offset_at(t)))
                return pixels[y:y + height]

            audio = AudioFileClip(str(audio_path))
            fitted_audio = self._fit_audio(audio, schedule.duration)

            video = VideoClip(frame_function=frame_function, duration=schedule.duration)
            video = video.with_audio(fitted_audio)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(prefix="weaveit-render-") as work_dir:
                video.write_videofile(
                    str(output_path),
                    fps=self.fps,
                    codec=self.video_codec,
                    audio_codec=self.audio_codec,
                    audio_bitrate=self.audio_bitrate,
                    preset=self.preset,
                    threads=self.threads,
                    temp_audiofile=str(Path(work_dir) / "narration.m4a"),
                    ffmpeg_params=["-pix_fmt", "yuv420p", "-movflags", "+faststart"],
                    logger=None,
                )

            if not output_path.exists() or output_path.stat().st_size == 0:
                raise RenderFailed("Encoder produced no output", content_id=content_id)

        except RenderFailed:
            output_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            output_path.unlink(missing_ok=True)
            logger.exception(f"{log_prefix}Render failed")
            raise RenderFailed(f"Render failed: {e}", content_id=content_id, cause=e) from e
        finally:
            self._close_clips(video, fitted_audio, audio)

        file_size_mb = round(output_path.stat().st_size / (1024 * 1024), 2)
        render_time = time.time() - start_time

        logger.info(
            f"{log_prefix}Render complete: {output_path.name}, {file_size_mb}MB, "
            f"video={schedule.duration:.2f}s in {render_time:.1f}s"
        )

        return RenderResult(
            output_path=output_path,
            duration_seconds=schedule.duration,
            total_scroll=schedule.total_scroll,
            velocity=schedule.velocity,
            fps=self.fps,
            resolution=f"{self.width}x{self.height}",
            line_count=len(column.lines),
            exceeds_readable_speed=exceeds,
            file_size_mb=file_size_mb,
            render_time_seconds=round(render_time, 2),
        )

    async def render_async(
        self,
        script: Union[DisplayScript, str, bytes],
        audio_path: Union[str, Path],
        duration_seconds: float,
        output_path: Union[str, Path],
        content_id: Optional[str] = None,
    ) -> RenderResult:
        """Run `render` in a worker thread."""
        return await asyncio.to_thread(
            self.render, script, audio_path, duration_seconds, output_path, content_id
        )
