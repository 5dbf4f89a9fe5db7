from fastapi import APIRouter, Depends
from symvora.models.requests import SymptomRequest
from symvora.models.responses import AIResponse, ErrorResponse
from symvora.services.analyzer import Analyzer
from symvora.services.dependencies import get_analyzer

router = APIRouter()

@router.post("/analyze",
             response_model=AIResponse,
             responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def analyze_symptoms(
    request: SymptomRequest,
    analyzer: Analyzer = Depends(get_analyzer)
) -> AIResponse:
    """
    Produce an advisory for the described symptoms
    """
    return await analyzer.analyze(request)
