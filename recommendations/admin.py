from django.contrib import admin

from recommendations.models import Category, Entity, Recommendation


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "display_name", "is_active")


@admin.register(Entity)
class EntityAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "created_at")
    list_filter = ("category",)
    search_fields = ("name",)


@admin.register(Recommendation)
class RecommendationAdmin(admin.ModelAdmin):
    list_display = ("id", "entity", "user", "rating", "created_at")
    list_filter = ("entity__category",)
    list_select_related = ("entity", "entity__category", "user")
