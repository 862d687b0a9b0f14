"""
Core module initialization
"""

from .config import Config, SuperAgentSetting, EnvSuperAgentSetting, StaticSuperAgentSetting
from .types import Agent, AgentID, Identity, Note, Resource, ResourceKind, OperationResult, Page

__all__ = [
    "Config",
    "SuperAgentSetting",
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
]
