import logging
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import permissions, status

from recommendations.models import Category
from tags.serializers import TagListSerializer, TagUsageStatSerializer
from tags.services.tag_merge import get_tags_for_category
from tags.services.tag_service import get_tag_usage_stats

logger = logging.getLogger(__name__)

PROMOTED_FILTERS = {"true": True, "false": False}


def _resolve_category(request):
    """
    Returns (category, error_response) for the `categoryName` query param.
    """
    category_name = request.query_params.get("categoryName")

    if not category_name:
        return None, Response(
            {"error": "categoryName query parameter is required"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    category = Category.objects.filter(name=category_name).first()
    if category is None:
        return None, Response(
            {"error": f'Category "{category_name}" not found'},
            status=status.HTTP_404_NOT_FOUND,
        )

    return category, None


class TagListView(APIView):
    """
    GET /api/tags/?categoryName=MOVIE[&promoted=true|false]

    Hardcoded + promoted community tags for a category.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        category, error = _resolve_category(request)
        if error:
            return error

        promoted = PROMOTED_FILTERS.get(
            (request.query_params.get("promoted") or "").lower()
        )
        tags = get_tags_for_category(category, promoted=promoted)

        serializer = TagListSerializer({
            "category_name": category.name,
            "tags": tags,
            "count": len(tags),
        })
        return Response(serializer.data)


class TagUsageStatsView(APIView):
    """Most used community tags of a category, for the admin dashboard."""
    permission_classes = [permissions.IsAdminUser]

    DEFAULT_LIMIT = 10
    MAX_LIMIT = 100

    def get(self, request):
        category, error = _resolve_category(request)
        if error:
            return error

        try:
            limit = int(request.query_params.get("limit", self.DEFAULT_LIMIT))
        except ValueError:
            return Response(
                {"error": "limit must be an integer"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        limit = max(1, min(limit, self.MAX_LIMIT))

        stats = get_tag_usage_stats(category, limit=limit)
        logger.info(f"Tag usage stats: category={category.name} rows={len(stats)}")

        return Response(TagUsageStatSerializer(stats, many=True).data)
