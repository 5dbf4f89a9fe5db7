from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime, timezone

class AIResponse(BaseModel):
    result: str = Field(..., min_length=1, description="Human-readable advisory text")

class ErrorDetail(BaseModel):
    message: str
    error_code: str
    error_type: str
    request_id: Optional[str] = None

class ErrorResponse(BaseModel):
    detail: ErrorDetail

class HealthStatus(BaseModel):
    status: str = Field(description="Overall service status")
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: Optional[str] = None
    version: str

class HealthDetails(HealthStatus):
    analyzer: str = Field(description="Active analyzer: placeholder or provider")
    resource_metrics: Dict[str, float] = Field(description="System resource utilization metrics")
