import logging
from django.db import transaction
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import permissions, status

from recommendations.models import Category, Recommendation
from recommendations.serializers import (
    CategorySerializer,
    RecommendationCreateSerializer,
    RecommendationSerializer,
    RecommendationUpdateSerializer,
)
from recommendations.services.lifecycle import (
    on_recommendation_created,
    on_recommendation_deleted,
    on_recommendation_updated,
)

logger = logging.getLogger(__name__)


class CategoryListView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        categories = Category.objects.active().order_by("name")
        return Response(CategorySerializer(categories, many=True).data)


class RecommendationListCreateView(APIView):
    """
    GET  /api/recommendations/ - all recommendations, newest first
    POST /api/recommendations/ - create one (authenticated)
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get(self, request):
        recommendations = Recommendation.objects.with_related()

        category_name = request.query_params.get("categoryName")
        if category_name:
            recommendations = recommendations.filter(entity__category__name=category_name)

        return Response(RecommendationSerializer(recommendations, many=True).data)

    def post(self, request):
        serializer = RecommendationCreateSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            recommendation = serializer.save()
            # tag tracking is best-effort here, failures are only logged
            on_recommendation_created(recommendation)

        logger.info(
            f"Recommendation created: id={recommendation.id} "
            f"user={request.user.id} entity={recommendation.entity_id}"
        )
        return Response(
            RecommendationSerializer(recommendation).data,
            status=status.HTTP_201_CREATED,
        )


class RecommendationDetailView(APIView):
    """
    GET    /api/recommendations/<id>/
    PUT    /api/recommendations/<id>/  (owner only)
    PATCH  /api/recommendations/<id>/  (owner only)
    DELETE /api/recommendations/<id>/  (owner only)
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def _get_recommendation(self, pk):
        return Recommendation.objects.with_related().filter(pk=pk).first()

    def _check_owner(self, request, pk):
        """Returns (recommendation, error_response)."""
        recommendation = self._get_recommendation(pk)
        if recommendation is None:
            return None, Response(
                {"error": "Recommendation not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        if recommendation.user_id != request.user.id:
            return None, Response(
                {"error": "Forbidden"},
                status=status.HTTP_403_FORBIDDEN,
            )
        return recommendation, None

    def get(self, request, pk):
        recommendation = self._get_recommendation(pk)
        if recommendation is None:
            return Response(
                {"error": "Recommendation not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(RecommendationSerializer(recommendation).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        recommendation, error = self._check_owner(request, pk)
        if error:
            return error

        serializer = RecommendationUpdateSerializer(
            recommendation,
            data=request.data,
            partial=partial,
        )
        serializer.is_valid(raise_exception=True)

        old_tags = list(recommendation.tags)

        try:
            with transaction.atomic():
                recommendation = serializer.save()
                if "tags" in serializer.validated_data:
                    on_recommendation_updated(recommendation, old_tags, recommendation.tags)
        except Exception:
            # rolled back, including any counters already touched
            logger.exception(f"Failed to update recommendation={pk}")
            return Response(
                {"error": "Failed to update recommendation"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(RecommendationSerializer(recommendation).data)

    def delete(self, request, pk):
        recommendation, error = self._check_owner(request, pk)
        if error:
            return error

        with transaction.atomic():
            on_recommendation_deleted(recommendation)
            recommendation.delete()

        logger.info(f"Recommendation deleted: id={pk} user={request.user.id}")
        return Response(
            {"message": "Recommendation deleted successfully"},
            status=status.HTTP_200_OK,
        )
