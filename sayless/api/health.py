from typing import Any, Dict

from fastapi import APIRouter

from ..providers.circle import CircleProvider
from ..providers.ens import EnsResolverProvider
from ..providers.oneinch import OneInchProvider

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    providers = [OneInchProvider(), CircleProvider(), EnsResolverProvider()]

    provider_status = {}
    for provider in providers:
        provider_status[provider.name] = await provider.health_check()

    all_healthy = all(
        status["status"] in ["healthy", "unavailable"]
        for status in provider_status.values()
    )

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if all_healthy and available_providers > 0 else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status)
    }
