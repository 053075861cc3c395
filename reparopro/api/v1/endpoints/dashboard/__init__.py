from .dashboard import router

__all__ = ["router"]
