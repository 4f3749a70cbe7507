"""SQLAlchemy models package.

All ORM classes are imported here so mapper configuration does not depend on
import order.
"""

from dashboard.models import (  # noqa: F401
    budget,
    expense,
)
