"""
Tests for the job orchestrator.
"""
import asyncio

import pytest

from weaveit.exceptions import EnhancementFailed, RenderFailed, SynthesisFailed
from weaveit.keys import OutputType
from weaveit.orchestration import BACKGROUND_TASKS, ContentJob, JobOrchestrator, JobState, StatusPoller
from weaveit.providers.exceptions import ProviderError
from weaveit.services import ScriptEnhancer, SpeechSynthesizer

def _job(output_type: OutputType, content_id: str, script: str = "print('hi')\n") -> ContentJob:
    return ContentJob.create(script=script, output_type=output_type, title="Test", content_id=content_id)


def _artifacts(store, content_id):
    return {suffix for suffix in ("mp3", "mp4", "failed") if store.path_for(content_id, suffix).exists()}


def _scratch_entries(store):
    if not store.scratch_root.exists():
        return []
    return list(store.scratch_root.iterdir())


class TestContentJob:

    def test_create_generates_prefixed_id(self):
        job = ContentJob.create(script="x", output_type=OutputType.AUDIO)
        assert job.content_id.startswith("audio_")
        assert job.output_type is OutputType.AUDIO

    def test_blank_script_rejected(self):
        with pytest.raises(ValueError):
            ContentJob.create(script="  \n", output_type=OutputType.VIDEO)


class TestPipelineByOutputType:

    @pytest.mark.asyncio
    async def test_audio_job_publishes_only_mp3(self, orchestrator, store, fake_renderer):
        result = await orchestrator.run(_job(OutputType.AUDIO, "audio_1"))

        assert result.state is JobState.DONE
        assert _artifacts(store, "audio_1") == {"mp3"}
        assert result.audio_path == store.path_for("audio_1", "mp3")
        assert result.video_path is None
        assert result.duration_seconds == 12.5
        assert fake_renderer.calls == []
        assert _scratch_entries(store) == []

    @pytest.mark.asyncio
    async def test_video_job_publishes_only_mp4(self, orchestrator, store, fake_renderer):
        result = await orchestrator.run(_job(OutputType.VIDEO, "video_1"))

        assert result.state is JobState.DONE
        assert _artifacts(store, "video_1") == {"mp4"}
        assert result.audio_path is None
        assert result.video_path == store.path_for("video_1", "mp4")

        call = fake_renderer.calls[0]
        assert call["audio_existed"]
        assert store.scratch_root in call["audio_path"].parents
        assert call["duration_seconds"] == 12.5
        assert _scratch_entries(store) == []

    @pytest.mark.asyncio
    async def test_both_job_publishes_audio_before_render(self, orchestrator, store, fake_renderer):
        result = await orchestrator.run(_job(OutputType.BOTH, "both_1"))

        assert _artifacts(store, "both_1") == {"mp3", "mp4"}
        call = fake_renderer.calls[0]
        assert call["audio_path"] == store.path_for("both_1", "mp3")
        assert call["audio_existed"]
        assert result.metadata["render"]["resolution"] == "1280x720"

    @pytest.mark.asyncio
    async def test_renderer_gets_original_script_not_narration(self, orchestrator, fake_renderer, fake_llm):
        await orchestrator.run(_job(OutputType.VIDEO, "video_1", script="SELECT 1;"))
        assert fake_renderer.calls[0]["script"] == "SELECT 1;"
        assert fake_renderer.calls[0]["script"] != fake_llm.narration

    @pytest.mark.asyncio
    async def test_narration_is_what_gets_spoken(self, orchestrator, fake_voice, fake_llm):
        await orchestrator.run(_job(OutputType.AUDIO, "audio_1"))
        assert fake_voice.calls == [fake_llm.narration]

    @pytest.mark.asyncio
    async def test_render_writes_to_hidden_staging_path(self, orchestrator, store, fake_renderer):
        await orchestrator.run(_job(OutputType.VIDEO, "video_1"))
        staged = fake_renderer.calls[0]["output_path"]
        assert staged.parent == store.root
        assert staged.name.startswith(".video_1.mp4.")
        assert not staged.exists()


class TestFailures:

    @pytest.mark.asyncio
    async def test_enhancement_failure(self, orchestrator, store, fake_llm, fake_voice):
        fake_llm.error = ProviderError("fake-llm", "HTTP 500")

        with pytest.raises(EnhancementFailed):
            await orchestrator.run(_job(OutputType.BOTH, "both_1"))

        assert _artifacts(store, "both_1") == {"failed"}
        assert store.read_failure("both_1")["stage"] == "enhancing"
        assert fake_voice.calls == []

    @pytest.mark.asyncio
    async def test_synthesis_failure_writes_no_artifacts(self, orchestrator, store, fake_voice, fake_renderer):
        fake_voice.error = ProviderError("fake-voice", "down")

        with pytest.raises(SynthesisFailed):
            await orchestrator.run(_job(OutputType.BOTH, "both_1"))

        assert _artifacts(store, "both_1") == {"failed"}
        assert fake_renderer.calls == []
        assert _scratch_entries(store) == []

    @pytest.mark.asyncio
    async def test_render_failure_keeps_published_audio(self, orchestrator, store, fake_renderer):
        fake_renderer.error = RenderFailed("encoder crashed", content_id="both_1")

        with pytest.raises(RenderFailed):
            await orchestrator.run(_job(OutputType.BOTH, "both_1"))

        assert _artifacts(store, "both_1") == {"mp3", "failed"}
        assert store.read_failure("both_1")["stage"] == "rendering"
        assert [p for p in store.root.iterdir() if p.is_file() and p.name.startswith(".")] == []

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped_for_its_stage(self, orchestrator, store, fake_renderer):
        fake_renderer.error = MemoryError("out of memory")

        with pytest.raises(RenderFailed) as exc_info:
            await orchestrator.run(_job(OutputType.VIDEO, "video_1"))

        assert isinstance(exc_info.value.cause, MemoryError)
        assert _artifacts(store, "video_1") == {"failed"}

    @pytest.mark.asyncio
    async def test_failed_job_reports_failed(self, orchestrator, store, fake_voice):
        fake_voice.error = ProviderError("fake-voice", "down")
        with pytest.raises(SynthesisFailed):
            await orchestrator.run(_job(OutputType.AUDIO, "audio_1"))

        report = StatusPoller(store=store, public_base_path="/api/content").check("audio_1")
        assert report.status.value == "failed"
        assert "down" in report.error

    @pytest.mark.asyncio
    async def test_rerun_clears_failure_marker(self, orchestrator, store, fake_voice):
        fake_voice.error = ProviderError("fake-voice", "down")
        with pytest.raises(SynthesisFailed):
            await orchestrator.run(_job(OutputType.AUDIO, "audio_1"))

        fake_voice.error = None
        await orchestrator.run(_job(OutputType.AUDIO, "audio_1"))

        assert _artifacts(store, "audio_1") == {"mp3"}


class SlowLLM:
    """Tracks how many enhancements run at once."""

    def __init__(self):
        self.active = 0
        self.peak = 0

    name = "slow-llm"
    is_available = True

    async def complete(self, system_prompt, user_prompt):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.05)
        self.active -= 1
        return "narration"

    async def close(self):
        return None


class TestConcurrency:

    def _orchestrator(self, store, fake_voice, fake_renderer, llm):
        return JobOrchestrator(
            store=store,
            enhancer=ScriptEnhancer(provider=llm),
            synthesizer=SpeechSynthesizer(provider=fake_voice),
            renderer=fake_renderer,
            max_concurrent_synthesis=4,
            max_concurrent_renders=2,
        )

    @pytest.mark.asyncio
    async def test_same_id_jobs_run_one_at_a_time(self, store, fake_voice, fake_renderer, fixed_probe):
        llm = SlowLLM()
        orchestrator = self._orchestrator(store, fake_voice, fake_renderer, llm)

        await asyncio.gather(
            orchestrator.run(_job(OutputType.AUDIO, "audio_same")),
            orchestrator.run(_job(OutputType.AUDIO, "audio_same")),
        )

        assert llm.peak == 1
        assert not orchestrator.is_running("audio_same")

    @pytest.mark.asyncio
    async def test_distinct_ids_run_concurrently(self, store, fake_voice, fake_renderer, fixed_probe):
        llm = SlowLLM()
        orchestrator = self._orchestrator(store, fake_voice, fake_renderer, llm)

        await asyncio.gather(
            orchestrator.run(_job(OutputType.AUDIO, "audio_a")),
            orchestrator.run(_job(OutputType.AUDIO, "audio_b")),
        )

        assert llm.peak == 2
        assert store.exists("audio_a", "mp3") and store.exists("audio_b", "mp3")


class PeakTracker:
    """Wraps a fake stage and records how many calls overlap."""

    def __init__(self, inner):
        self.inner = inner
        self.active = 0
        self.peak = 0

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def _tracked(self, call):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(0.05)
            return await call
        finally:
            self.active -= 1

    async def synthesize(self, text, output_path):
        return await self._tracked(self.inner.synthesize(text, output_path))

    async def render_async(self, *args, **kwargs):
        return await self._tracked(self.inner.render_async(*args, **kwargs))


class TestStageLimits:

    @pytest.mark.asyncio
    async def test_render_slots_bound_parallel_renders(self, store, fake_llm, fake_voice, fake_renderer, fixed_probe):
        renderer = PeakTracker(fake_renderer)
        orchestrator = JobOrchestrator(
            store=store,
            enhancer=ScriptEnhancer(provider=fake_llm),
            synthesizer=SpeechSynthesizer(provider=fake_voice),
            renderer=renderer,
            max_concurrent_synthesis=4,
            max_concurrent_renders=1,
        )

        await asyncio.gather(*(orchestrator.run(_job(OutputType.VIDEO, f"video_r{i}")) for i in range(4)))

        assert renderer.peak == 1
        assert len(renderer.calls) == 4
        assert all(store.exists(f"video_r{i}", "mp4") for i in range(4))

    @pytest.mark.asyncio
    async def test_synthesis_slots_bound_parallel_synthesis(self, store, fake_llm, fake_voice, fake_renderer, fixed_probe):
        voice = PeakTracker(fake_voice)
        orchestrator = JobOrchestrator(
            store=store,
            enhancer=ScriptEnhancer(provider=fake_llm),
            synthesizer=SpeechSynthesizer(provider=voice),
            renderer=fake_renderer,
            max_concurrent_synthesis=2,
            max_concurrent_renders=4,
        )

        await asyncio.gather(*(orchestrator.run(_job(OutputType.AUDIO, f"audio_s{i}")) for i in range(5)))

        assert voice.peak == 2
        assert len(voice.calls) == 5


class TestSubmit:

    @pytest.mark.asyncio
    async def test_submit_runs_in_background(self, orchestrator, store):
        task = orchestrator.submit(_job(OutputType.AUDIO, "audio_bg"))
        assert task in BACKGROUND_TASKS

        await task

        assert store.exists("audio_bg", "mp3")
        assert task not in BACKGROUND_TASKS

    @pytest.mark.asyncio
    async def test_submit_failure_is_recorded_not_raised(self, orchestrator, store, fake_llm):
        fake_llm.error = ProviderError("fake-llm", "down")

        await orchestrator.submit(_job(OutputType.VIDEO, "video_bg"))

        assert store.read_failure("video_bg")["stage"] == "enhancing"
