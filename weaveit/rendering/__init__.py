"""
Scrolling-script rendering.
"""
from .models import DisplayScript, NarrationAudio, RenderResult, ScrollSchedule
from .layout import ColumnStyle, ScriptColumn, load_font
from .engine import ScrollingScriptRenderer

__all__ = [
    "DisplayScript",
    "NarrationAudio",
    "RenderResult",
    "ScrollSchedule",
    "ColumnStyle",
    "ScriptColumn",
    "load_font",
    "ScrollingScriptRenderer",
]
