from fastapi import APIRouter, Depends
import psutil
from symvora.core.config import Settings
from symvora.core.context import RequestContext
from symvora.models.responses import HealthStatus, HealthDetails
from symvora.services.analyzer import Analyzer
from symvora.services.dependencies import get_analyzer, get_app_settings

router = APIRouter()

@router.get("/", response_model=HealthStatus)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Basic health check endpoint"""
    return HealthStatus(
        status="healthy",
        request_id=RequestContext.get_request_id(),
        version=settings.VERSION
    )

@router.get("/details", response_model=HealthDetails)
async def health_details(
    analyzer: Analyzer = Depends(get_analyzer),
    settings: Settings = Depends(get_app_settings)
):
    """Health plus active analyzer and system resource usage"""
    memory = psutil.virtual_memory()
    return HealthDetails(
        status="healthy",
        request_id=RequestContext.get_request_id(),
        version=settings.VERSION,
        analyzer=analyzer.name,
        resource_metrics={
            "cpu_percent": psutil.cpu_percent(),
            "memory_used_percent": memory.percent,
            "memory_available_gb": memory.available / (1024 * 1024 * 1024)
        }
    )
