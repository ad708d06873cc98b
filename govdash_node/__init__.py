"""
GovDash Node package initializer

Keep this module lightweight. Do not import the web stack here, so the
governance core can be used without FastAPI/uvicorn installed at import time.
"""

__all__ = []
