"""SQLAlchemy models package.

All ORM classes are imported here so the registry is complete regardless of
import order.
"""

from app.models import contract  # noqa: F401
