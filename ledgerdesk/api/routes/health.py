# ledgerdesk/api/routes/health.py
from fastapi import APIRouter

from ledgerdesk.config.settings import settings

router = APIRouter()


@router.get("/")
async def health():
    return {"status": "ok", "message": f"{settings.APP_NAME} running"}
