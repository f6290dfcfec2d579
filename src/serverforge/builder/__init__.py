"""
Builder Package

Applies generated layouts to a guild and clears a guild back to a baseline,
plus result rendering.
"""

from .engine import BASELINE_ROLES, BuildResult, NukeResult, RunStatus, ServerBuilder
from .reporting import build_result_embed, nuke_result_embed, structure_preview_embed, summarize_errors

__all__ = [
    "BASELINE_ROLES",
    "BuildResult",
    "NukeResult",
    "RunStatus",
    "ServerBuilder",
    "build_result_embed",
    "nuke_result_embed",
    "structure_preview_embed",
    "summarize_errors",
]
