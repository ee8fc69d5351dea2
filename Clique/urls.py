"""
URL configuration for Clique project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from recommendations.views import CategoryListView, RecommendationListCreateView, RecommendationDetailView
from tags.views import TagListView, TagUsageStatsView
urlpatterns = [
    path("", include("django_prometheus.urls")),
    path('admin/', admin.site.urls),
    path("auth/", include("djoser.urls")),
    path("auth/", include("djoser.urls.jwt")),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path("api/categories/", CategoryListView.as_view(), name="category-list"),
    path("api/recommendations/", RecommendationListCreateView.as_view(), name="recommendation-list"),
    path("api/recommendations/<int:pk>/", RecommendationDetailView.as_view(), name="recommendation-detail"),
    path("api/tags/", TagListView.as_view(), name="tag-list"),
    path("api/tags/stats/", TagUsageStatsView.as_view(), name="tag-usage-stats"),
]
