from fastapi import APIRouter
from .credentials_router import router as credentials_router
from .settings_router import router as settings_router
from .github_router import router as github_router, callback_router

router = APIRouter()
router.include_router(credentials_router)
router.include_router(settings_router)
router.include_router(github_router)
router.include_router(callback_router)
