"""
Uvicorn entry point: uvicorn main:app --reload
"""
from portal.main import app  # noqa: F401
