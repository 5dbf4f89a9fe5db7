from fastapi import Request

from symvora.core.config import Settings
from symvora.services.analyzer import Analyzer

def get_analyzer(request: Request) -> Analyzer:
    """Return the analyzer the application was built with"""
    return request.app.state.analyzer

def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was built with"""
    return request.app.state.settings
