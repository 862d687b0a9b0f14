"""
Package authz decides who may do what to a resource.
"""

from .types import Action, Advisory, Decision, READER_ACTIONS
from .graph import IdentityGraph
from .policy import Policy

__all__ = [
    'Action',
    'Advisory',
    'Decision',
    'READER_ACTIONS',
    'IdentityGraph',
    'Policy',
]
