"""API route handlers."""

from .jobs import router as jobs_router
from .matching import router as matching_router
from .analytics import router as analytics_router
