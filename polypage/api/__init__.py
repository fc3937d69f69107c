"""
HTTP API (FastAPI).
"""
