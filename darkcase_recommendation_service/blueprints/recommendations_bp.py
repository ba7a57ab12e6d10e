"""Recommendation and watch history endpoints."""
import azure.functions as func
import logging
import json

from darkcase_recommendation_service.config import get_default_recommendation_limit
from darkcase_recommendation_service.services import RecommendationService

# Initialize blueprint
bp = func.Blueprint()

# Initialize service (singleton pattern)
recommendation_service = RecommendationService()

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 50
MAX_HISTORY = 100
DEFAULT_HISTORY = 50


def _json_response(body: dict, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),  # default=str handles datetime
        status_code=status_code,
        mimetype="application/json"
    )


def _error(message: str, status_code: int) -> func.HttpResponse:
    return _json_response({"error": message}, status_code=status_code)


def _parse_limit(raw, default: int, maximum: int) -> int | None:
    """Parse a limit query parameter; None if it is not an integer in [1, maximum]."""
    if raw is None or raw == '':
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return None
    if limit < 1 or limit > maximum:
        return None
    return limit


@bp.route(route="users/{user_id}/recommendations", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_user_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get personalised recommendations for a user.

    Query Parameters:
        - limit: Number of recommendations (default: 20, max: 50)
    """
    try:
        user_id = req.route_params.get('user_id')

        if not user_id:
            return _error("user_id is required", 400)

        limit = _parse_limit(
            req.params.get('limit'),
            default=get_default_recommendation_limit(),
            maximum=MAX_RECOMMENDATIONS
        )
        if limit is None:
            return _error(f"limit must be an integer between 1 and {MAX_RECOMMENDATIONS}", 400)

        recommendations = recommendation_service.get_recommendations_for_user(
            user_id=user_id,
            limit=limit
        )

        response = {
            "user_id": user_id,
            "count": len(recommendations),
            "recommendations": recommendations
        }
        if not recommendations:
            response["message"] = "No recommendations available"

        return _json_response(response)

    except Exception as e:
        logger.error(f"Error getting recommendations: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="users/{user_id}/history", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_user_history(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get a user's watch history, most recent first.

    Query Parameters:
        - limit: Number of entries (default: 50, max: 100)
    """
    try:
        user_id = req.route_params.get('user_id')

        if not user_id:
            return _error("user_id is required", 400)

        limit = _parse_limit(req.params.get('limit'), default=DEFAULT_HISTORY, maximum=MAX_HISTORY)
        if limit is None:
            return _error(f"limit must be an integer between 1 and {MAX_HISTORY}", 400)

        history = recommendation_service.get_history(user_id=user_id, limit=limit)

        return _json_response({
            "user_id": user_id,
            "count": len(history),
            "history": history
        })

    except Exception as e:
        logger.error(f"Error getting history: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


@bp.route(route="users/{user_id}/history", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def update_user_history(req: func.HttpRequest) -> func.HttpResponse:
    """
    Record playback progress.

    Body:
        {"caseId": "...", "progress": 0..100}
    """
    try:
        user_id = req.route_params.get('user_id')

        if not user_id:
            return _error("user_id is required", 400)

        try:
            body = req.get_json()
        except ValueError:
            return _error("Request body must be valid JSON", 400)

        if not isinstance(body, dict):
            return _error("caseId and progress are required", 400)

        case_id = body.get('caseId')
        progress = body.get('progress')

        if not case_id or isinstance(progress, bool) or not isinstance(progress, (int, float)):
            return _error("caseId and progress are required", 400)

        entry = recommendation_service.record_progress(
            user_id=user_id,
            case_id=str(case_id),
            progress=progress
        )

        return _json_response({"message": "History updated", "entry": entry})

    except Exception as e:
        logger.error(f"Error updating history: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/stats", methods=["GET"])
def get_recommendation_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get statistics about the recommendation system.
    """
    try:
        stats = recommendation_service.get_stats()
        return _json_response(stats)

    except Exception as e:
        logger.error(f"Error getting stats: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return _json_response({
        "status": "healthy",
        "service": "darkcase-recommendation-service",
        "version": "1.0.0"
    })
