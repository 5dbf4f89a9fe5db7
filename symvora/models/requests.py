from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class SymptomRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symptoms: str = Field("", description="Description of symptoms in natural language")
    additional_context: Optional[str] = Field(None, description="Additional patient context or medical history")
