from .estimate import router

__all__ = ["router"]
