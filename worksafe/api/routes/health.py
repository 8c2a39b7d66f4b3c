from fastapi import APIRouter

from worksafe.core.config import get_settings
from worksafe.core.deps import get_provider_api_key
from worksafe.schemas.safety import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    settings = get_settings()
    return HealthResponse(
        status="ok",
        service=settings.app_name,
        version=settings.app_version,
        provider_configured=get_provider_api_key() is not None,
    )
