"""
HTTP API and persistence for the player registry (FastAPI + SQLAlchemy).
"""
