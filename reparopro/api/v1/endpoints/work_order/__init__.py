from .work_order import router

__all__ = ["router"]
