"""
mediagate Python Package

Authorization and moderation core for a media-sharing application.
"""

__version__ = "0.1.0"

from .core.service import MediaGate
from .core.config import Config, EnvSuperAgentSetting, StaticSuperAgentSetting
from .core.types import (
    Agent,
    AgentID,
    Identity,
    Note,
    Resource,
    ResourceKind,
    OperationResult,
    Page,
)
from .authz import Action, Decision, IdentityGraph, Policy
from .errors import ErrorCode

__all__ = [
    "MediaGate",
    "Config",
    "EnvSuperAgentSetting",
    "StaticSuperAgentSetting",
    "Agent",
    "AgentID",
    "Identity",
    "Note",
    "Resource",
    "ResourceKind",
    "OperationResult",
    "Page",
    "Action",
    "Decision",
    "IdentityGraph",
    "Policy",
    "ErrorCode",
]
