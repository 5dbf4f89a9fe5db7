from fastapi import APIRouter, Depends
from symvora.core.config import Settings
from symvora.services.dependencies import get_app_settings

router = APIRouter()

@router.get("/")
async def root(settings: Settings = Depends(get_app_settings)):
    """
    Root endpoint that returns basic API information
    """
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "description": "Symptom advisory service"
    }
