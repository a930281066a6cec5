"""
Serverless entry point.

The Python runtime imports this file and serves the `app` ASGI
application. All requests are routed here by the platform config.

The backend directory is added to sys.path at module level so that
`from main import app` works without installing the project.
"""

import sys
import os

# Add backend directory to path so FastAPI app imports resolve
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_backend_dir = os.path.join(_root, "backend")

if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

# Import the FastAPI app; the runtime looks for `app` at module level
from main import app  # noqa: E402
