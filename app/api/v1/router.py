"""
Главный роутер API v1.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import bom_checks, corrections, doc_checks, reference_files

api_router = APIRouter()

# Подключение роутеров
api_router.include_router(bom_checks.router, prefix="/bom-checks", tags=["bom-checks"])
api_router.include_router(corrections.router, prefix="/corrections", tags=["corrections"])
api_router.include_router(reference_files.router, prefix="/reference-files", tags=["reference-files"])
api_router.include_router(doc_checks.router, prefix="/doc-checks", tags=["doc-checks"])
