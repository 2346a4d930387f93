"""
Transport implementations for the access status service.

Supports:
- HTTP/REST (FastAPI)
"""
