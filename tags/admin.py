from django.contrib import admin, messages

from tags.models import CommunityTag
from tags.services.tag_service import reconcile_promotions


@admin.register(CommunityTag)
class CommunityTagAdmin(admin.ModelAdmin):
    list_display = ("tag", "category", "usage_count", "is_promoted", "created_at")
    list_filter = ("category", "is_promoted")
    search_fields = ("tag", "normalized_tag")
    readonly_fields = ("normalized_tag", "usage_count", "is_promoted", "created_at", "updated_at")
    actions = ["reconcile_selected_categories"]

    @admin.action(description="Re-apply promotion threshold to selected categories")
    def reconcile_selected_categories(self, request, queryset):
        changed = 0
        for category in {ct.category for ct in queryset.select_related("category")}:
            changed += reconcile_promotions(category)
        self.message_user(request, f"{changed} community tags updated", messages.SUCCESS)
