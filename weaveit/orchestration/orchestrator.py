"""
Job Orchestrator.

Runs Enhancer -> Synthesizer -> Renderer for one content id and publishes
the artifacts its output type asks for. Nothing is tracked in memory beyond
the running job: readiness is the presence of files in the content store.
"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional

from weaveit.exceptions import (
    EnhancementFailed,
    PipelineError,
    RenderFailed,
    SynthesisFailed,
)
from weaveit.keys import AUDIO_SUFFIX, VIDEO_SUFFIX
from weaveit.persistence import ContentStore, get_content_store
from weaveit.rendering import ScrollingScriptRenderer
from weaveit.services import ScriptEnhancer, SpeechSynthesizer

from .enums import JobState
from .models import ContentJob, JobResult

logger = logging.getLogger(__name__)

# Keep references so running jobs are not garbage collected
BACKGROUND_TASKS = set()

STAGE_ERRORS = {
    JobState.ENHANCING: EnhancementFailed,
    JobState.SYNTHESIZING: SynthesisFailed,
    JobState.RENDERING: RenderFailed,
}


class JobOrchestrator:
    """
    Sequences the pipeline stages for content jobs.

    Synthesis and rendering are each bounded by a semaphore. Jobs that share
    a content id run one after the other.
    """

    def __init__(
        self,
        store: Optional[ContentStore] = None,
        enhancer: Optional[ScriptEnhancer] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
        renderer: Optional[ScrollingScriptRenderer] = None,
        max_concurrent_synthesis: Optional[int] = None,
        max_concurrent_renders: Optional[int] = None,
    ):
        from weaveit.config import config

        self.store = store or get_content_store()
        self.enhancer = enhancer or ScriptEnhancer()
        self.synthesizer = synthesizer or SpeechSynthesizer(ffprobe_path=config.paths.ffprobe_path)
        self.renderer = renderer or ScrollingScriptRenderer.from_config(config.render)

        synthesis_slots = max_concurrent_synthesis or config.limits.max_concurrent_synthesis
        render_slots = max_concurrent_renders or config.limits.max_concurrent_renders
        self._synthesis_slots = asyncio.Semaphore(synthesis_slots)
        self._render_slots = asyncio.Semaphore(render_slots)

        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

        logger.info(
            f"JobOrchestrator ready: synthesis slots={synthesis_slots}, "
            f"render slots={render_slots}, store={self.store.root}"
        )

    @asynccontextmanager
    async def _exclusive(self, content_id: str):
        lock = self._locks.get(content_id)
        if lock is None:
            lock = self._locks[content_id] = asyncio.Lock()
        self._lock_users[content_id] = self._lock_users.get(content_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[content_id] -= 1
            if self._lock_users[content_id] == 0:
                del self._lock_users[content_id]
                del self._locks[content_id]

    def is_running(self, content_id: str) -> bool:
        return content_id in self._locks

    async def run(self, job: ContentJob) -> JobResult:
        """
        Run one job to completion.

        Raises:
            PipelineError: the failing stage's error, after the failure
                marker has been written
        """
        async with self._exclusive(job.content_id):
            return await self._run(job)

    async def _run(self, job: ContentJob) -> JobResult:
        content_id = job.content_id
        output_type = job.output_type
        result = JobResult(content_id=content_id, output_type=output_type)
        start_time = time.time()
        scratch: Optional[Path] = None

        logger.info(f"[{content_id}] Job started: type={output_type.value}, title={job.title!r}")
        self.store.clear_failure(content_id)

        try:
            result.state = JobState.ENHANCING
            narration = await self.enhancer.enhance(job.script, content_id=content_id)

            result.state = JobState.SYNTHESIZING
            scratch = self.store.scratch_dir(content_id)
            async with self._synthesis_slots:
                audio = await self.synthesizer.synthesize(
                    narration,
                    scratch / f"narration.{AUDIO_SUFFIX}",
                    content_id=content_id,
                )
            result.duration_seconds = audio.duration_seconds
            audio_path = audio.path

            if output_type.publishes_audio:
                audio_path = self.store.publish(content_id, AUDIO_SUFFIX, audio_path)
                result.audio_path = audio_path

            if output_type.renders_video:
                result.state = JobState.RENDERING
                async with self._render_slots:
                    with self.store.staging(content_id, VIDEO_SUFFIX) as tmp_path:
                        render = await self.renderer.render_async(
                            job.script,
                            audio_path,
                            audio.duration_seconds,
                            tmp_path,
                            content_id=content_id,
                        )
                result.video_path = self.store.path_for(content_id, VIDEO_SUFFIX)
                result.metadata["render"] = render.model_dump(mode="json")

            result.state = JobState.DONE

        except PipelineError as e:
            self._record_failure(content_id, e, result.state)
            raise
        except Exception as e:
            error_cls = STAGE_ERRORS.get(result.state, PipelineError)
            wrapped = error_cls(f"Unexpected error: {e}", content_id=content_id, cause=e)
            logger.exception(f"[{content_id}] Unexpected error while {result.state.value}")
            self._record_failure(content_id, wrapped, result.state)
            raise wrapped from e
        finally:
            if scratch is not None:
                self.store.discard_scratch(scratch)
            result.elapsed_seconds = round(time.time() - start_time, 2)

        logger.info(
            f"[{content_id}] Job done in {result.elapsed_seconds:.1f}s "
            f"(narration {result.duration_seconds:.2f}s)"
        )
        return result

    def _record_failure(self, content_id: str, error: PipelineError, state: JobState) -> None:
        logger.error(f"[{content_id}] Job failed while {state.value}: {error.message}")
        try:
            self.store.mark_failed(content_id, error)
        except (OSError, PipelineError) as e:
            logger.error(f"[{content_id}] Could not write failure marker: {e}")

    async def _run_in_background(self, job: ContentJob) -> None:
        try:
            await self.run(job)
        except PipelineError:
            # Already logged and recorded in the store
            pass
        except Exception:
            logger.exception(f"[{job.content_id}] Background job crashed")

    def submit(self, job: ContentJob) -> asyncio.Task:
        """Start `job` in the background and return immediately."""
        task = asyncio.create_task(self._run_in_background(job))
        BACKGROUND_TASKS.add(task)
        task.add_done_callback(BACKGROUND_TASKS.discard)
        logger.info(f"[{job.content_id}] Job submitted")
        return task

    async def close(self) -> None:
        await self.enhancer.close()
        await self.synthesizer.close()
