from .machine import ModerationStateMachine

__all__ = ["ModerationStateMachine"]
