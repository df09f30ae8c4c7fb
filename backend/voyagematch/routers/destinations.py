"""Destinations router — searchable destinations with suggested budgets."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from voyagematch.dependencies import get_data_provider
from voyagematch.schemas.search import DestinationSuggestionOut
from voyagematch.services.data_provider import PackageDataProvider
from voyagematch.services.destination_service import destination_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/suggestions", response_model=list[DestinationSuggestionOut])
async def destination_suggestions(provider: PackageDataProvider = Depends(get_data_provider)):
    """Destinations guaranteed to return packages, with budget tiers for a 3-night stay."""
    try:
        return await destination_service.list_suggestions(provider)
    except Exception as e:
        logger.error(f"Destination suggestions failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
