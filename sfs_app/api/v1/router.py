"""API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from sfs_app.api.v1 import changes, documents, provisions, search

api_router = APIRouter()

api_router.include_router(provisions.router, prefix="/provisions", tags=["provisions"])
api_router.include_router(changes.router, prefix="/changes", tags=["changes"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
