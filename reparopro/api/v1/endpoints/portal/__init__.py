from .portal import router

__all__ = ["router"]
