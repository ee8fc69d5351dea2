from django.db import models
from recommendations.models import Category
from tags.services.registry import normalize


class CommunityTagManager(models.Manager):
    def for_category(self, category):
        return self.filter(category=category)

    def promoted(self, category):
        return (
            self.for_category(category)
            .filter(is_promoted=True)
            .order_by("-usage_count", "normalized_tag")
        )

    def top_usage(self, category, limit=10):
        return self.for_category(category).order_by("-usage_count", "normalized_tag")[:limit]


class CommunityTag(models.Model):
    """
    Usage counter for a user-written tag within one category.
    Promoted once usage_count reaches the promotion threshold,
    deleted when it drops to zero.
    """

    # Text as first written (trimmed), shown to clients
    tag = models.CharField(max_length=100)
    normalized_tag = models.CharField(max_length=100, db_index=True)

    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="community_tags",
    )

    usage_count = models.PositiveIntegerField(default=0)
    is_promoted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CommunityTagManager()

    class Meta:
        ordering = ["-usage_count", "normalized_tag"]
        constraints = [
            models.UniqueConstraint(
                fields=["normalized_tag", "category"],
                name="uniq_community_tag_category",
            ),
            models.CheckConstraint(
                condition=models.Q(usage_count__gte=0),
                name="community_tag_usage_non_negative",
            ),
        ]
        indexes = [
            models.Index(
                fields=["category", "is_promoted", "-usage_count"],
                name="ctag_cat_promoted_usage_idx",
            ),
        ]

    def save(self, *args, **kwargs):
        self.tag = self.tag.strip()
        self.normalized_tag = normalize(self.tag)
        super().save(*args, **kwargs)

    def __str__(self):
        state = "promoted" if self.is_promoted else "community"
        return f"{self.tag} · {self.category.name} ({self.usage_count}, {state})"
