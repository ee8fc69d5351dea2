from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from .entity import Entity


class RecommendationManager(models.Manager):
    def with_related(self):
        return self.select_related("user", "entity", "entity__category")

    def for_user(self, user):
        return self.with_related().filter(user=user)

    def for_category(self, category):
        return self.with_related().filter(entity__category=category)


class Recommendation(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="recommendations",
    )

    entity = models.ForeignKey(
        Entity,
        on_delete=models.CASCADE,
        related_name="recommendations",
    )

    # Free-text labels in the order the author typed them
    tags = models.JSONField(default=list, blank=True)

    link = models.URLField(max_length=500, null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    rating = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RecommendationManager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["user", "-created_at"],
                name="rec_user_created_idx",
            ),
        ]

    @property
    def category(self):
        return self.entity.category

    def __str__(self) -> str:
        return (
            f"Recommendation(user={self.user_id}, "
            f"entity={self.entity_id}, tags={len(self.tags)})"
        )
