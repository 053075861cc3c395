from .quote import router

__all__ = ["router"]
