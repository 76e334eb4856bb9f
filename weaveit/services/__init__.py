"""
Pipeline stage services.
"""
from .media_probe import MediaProbeError, probe_duration
from .script_enhancer import ScriptEnhancer, NARRATION_SYSTEM_PROMPT
from .speech_synthesizer import SpeechSynthesizer
from .preview import ScriptPreview, estimate_minutes, preview_script, script_quality

__all__ = [
    "MediaProbeError",
    "probe_duration",
    "ScriptEnhancer",
    "NARRATION_SYSTEM_PROMPT",
    "SpeechSynthesizer",
    "ScriptPreview",
    "estimate_minutes",
    "preview_script",
    "script_quality",
]
