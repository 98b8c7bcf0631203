from fastapi import APIRouter

from app.api.routes import analysis, chat, health, journal, profile, reports


router = APIRouter()

router.include_router(health.router)
router.include_router(journal.router)
router.include_router(profile.router)
router.include_router(analysis.router)
router.include_router(reports.router)
router.include_router(chat.router)
