from .likes import toggle_like, has_liked

__all__ = ["toggle_like", "has_liked"]
