from django.db import models
from .category import Category


class EntityManager(models.Manager):
    def get_or_create_named(self, name: str, category):
        return self.get_or_create(name=name.strip(), category=category)


class Entity(models.Model):
    """The real-world thing (a restaurant, a movie) recommendations point at."""

    name = models.CharField(max_length=255)
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="entities",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = EntityManager()

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "entities"
        constraints = [
            models.UniqueConstraint(
                fields=["name", "category"],
                name="uniq_entity_name_category",
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.category.name})"
