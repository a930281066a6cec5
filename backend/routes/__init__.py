"""
Routes package for the triage API.
Import all routers here for use in main.py.
"""

from routes.triage import router as triage_router
from routes.consultations import router as consultations_router

__all__ = [
    "triage_router",
    "consultations_router",
]
