"""API Routes"""

from barflow.routes import venues

__all__ = ["venues"]
