from typing import Any

import structlog
from fastapi import APIRouter, Depends
from google.cloud.firestore_v1.async_client import AsyncClient

from api.auth import User, get_current_user
from api.dependencies import get_firestore
from api.errors import BadRequestError, InternalError
from api.middleware.sanitizer import sanitized_body
from api.models import RecommendationsResponse
from api.services.recommendations import generate_personalized_recommendations

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post(
    "/recommendations/generate",
    response_model=RecommendationsResponse,
    tags=["Recommendations"],
    summary="Generate personalized recommendations",
)
async def generate_recommendations(
    current_user: User = Depends(get_current_user),
    body: dict[str, Any] = Depends(sanitized_body),
    firestore_client: AsyncClient = Depends(get_firestore),
) -> RecommendationsResponse:
    user_id = body.get("userId")
    if not user_id or not isinstance(user_id, str):
        raise BadRequestError("Missing userId")

    try:
        recommendations = await generate_personalized_recommendations(firestore_client, user_id)
    except Exception as e:
        logger.error("Recommendations error", user_id=user_id, uid=current_user.uid, error=str(e), exc_info=True)
        raise InternalError("Failed to generate recommendations", details=str(e))

    return RecommendationsResponse(success=True, recommendations=recommendations)
