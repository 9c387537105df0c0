"""Meeting domain - meeting records, CSV import and participant notifications"""

from .router import router

__all__ = ["router"]
