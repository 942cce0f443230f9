"""
Vercel serverless entry point.

The @vercel/python runtime serves the ASGI ``app`` exported here. Set
DATABASE_URL to a Postgres instance in the project settings: the function
filesystem is read-only apart from /tmp, so the SQLite default and the local
``uploads/`` folder do not persist (configure R2 for documents).
"""

import os
import sys

# Make backend/ importable so ``app`` resolves to the FastAPI package
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.main import app  # noqa: E402,F401
