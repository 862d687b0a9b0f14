"""
Like toggling. Each call flips the agent's like exactly once.
"""

from ..core.types import AgentID, Resource


def toggle_like(agent: AgentID, resource: Resource) -> Resource:
    """
    Return a copy of ``resource`` with ``agent``'s like flipped.

    Removal filters by value, so the remaining likes keep their order.
    """
    updated = resource.copy()
    if agent in updated.likes:
        updated.likes = [a for a in updated.likes if a != agent]
    else:
        updated.likes.append(agent)
    return updated


def has_liked(agent: AgentID, resource: Resource) -> bool:
    return agent in resource.likes
