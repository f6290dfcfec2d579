"""
Structure Package

Server layout schema, quota policy, model-output parsing, fallback layout and
the generator that ties them together.
"""

from .schema import (
    CategorySpec,
    ChannelKind,
    ChannelSpec,
    RoleSpec,
    ServerStructure,
    StructureError,
    parse_structure,
)
from .quotas import QuotaLimits, QuotaPolicy, VoicePolicy, enforce_quotas
from .fallback import fallback_structure
from .generator import GenerationOptions, StructureGenerator

__all__ = [
    "CategorySpec",
    "ChannelKind",
    "ChannelSpec",
    "RoleSpec",
    "ServerStructure",
    "StructureError",
    "parse_structure",
    "QuotaLimits",
    "QuotaPolicy",
    "VoicePolicy",
    "enforce_quotas",
    "fallback_structure",
    "GenerationOptions",
    "StructureGenerator",
]
