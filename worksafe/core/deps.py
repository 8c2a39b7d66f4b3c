"""
Dependencies for dependency injection
"""

import os
from functools import lru_cache
from typing import Optional

from langchain_openai import ChatOpenAI

from worksafe.core.config import get_settings


def get_provider_api_key() -> Optional[str]:
    """
    Resolve the vision provider credential

    Read from the process environment on every call so a key exported after
    startup is honoured; the .env-backed settings are the fallback.
    """
    api_key = os.environ.get("OPENAI_API_KEY") or get_settings().openai_api_key
    if api_key and api_key.strip():
        return api_key.strip()
    return None


@lru_cache()
def get_llm(api_key: str) -> ChatOpenAI:
    """Get vision-capable chat model bound to the given credential"""
    settings = get_settings()
    return ChatOpenAI(
        model=settings.openai_model,
        api_key=api_key,
        base_url=settings.openai_base_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def get_analysis_service():
    """Get analysis service instance for dependency injection"""
    from worksafe.services.analysis_service import AnalysisService

    return AnalysisService()


def get_report_builder():
    """Get PDF report builder instance for dependency injection"""
    from worksafe.services.report_pdf import SafetyReportPdfBuilder

    return SafetyReportPdfBuilder()
