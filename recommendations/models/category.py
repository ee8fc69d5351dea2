from django.db import models


class CategoryManager(models.Manager):
    def active(self):
        return self.filter(is_active=True)


class Category(models.Model):
    """
    Top-level kind of thing being recommended (RESTAURANT, MOVIE, ...).
    Community tags are partitioned per category.
    """

    class Names(models.TextChoices):
        RESTAURANT = "RESTAURANT", "Restaurant"
        MOVIE = "MOVIE", "Movie"
        FASHION = "FASHION", "Fashion"
        HOUSEHOLD = "HOUSEHOLD", "Household"
        OTHER = "OTHER", "Other"

    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=16, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CategoryManager()

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name
