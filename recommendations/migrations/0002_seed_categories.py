from django.db import migrations

CATEGORIES = [
    ("RESTAURANT", "Restaurant", "Restaurants and dining experiences", "🍽️"),
    ("MOVIE", "Movie", "Movies and TV shows", "🎬"),
    ("FASHION", "Fashion", "Fashion and accessories", "👗"),
    ("HOUSEHOLD", "Household", "Household items and home goods", "🏠"),
    ("OTHER", "Other", "Everything else worth sharing", "✨"),
]


def seed_categories(apps, schema_editor):
    Category = apps.get_model("recommendations", "Category")
    for name, display_name, description, icon in CATEGORIES:
        Category.objects.get_or_create(
            name=name,
            defaults={
                "display_name": display_name,
                "description": description,
                "icon": icon,
            },
        )


def unseed_categories(apps, schema_editor):
    Category = apps.get_model("recommendations", "Category")
    Category.objects.filter(
        name__in=[name for name, *_ in CATEGORIES],
        entities__isnull=True,
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("recommendations", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_categories, unseed_categories),
    ]
