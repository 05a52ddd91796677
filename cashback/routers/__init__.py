"""
FastAPI routers grouped by domain.

Each module exposes an APIRouter that is included by ``cashback.app``; the
routers only translate HTTP to CardService calls.
"""
