import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("recommendations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CommunityTag",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tag", models.CharField(max_length=100)),
                ("normalized_tag", models.CharField(db_index=True, max_length=100)),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("is_promoted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="community_tags",
                        to="recommendations.category",
                    ),
                ),
            ],
            options={
                "ordering": ["-usage_count", "normalized_tag"],
                "constraints": [
                    models.UniqueConstraint(fields=("normalized_tag", "category"), name="uniq_community_tag_category"),
                    models.CheckConstraint(
                        condition=models.Q(usage_count__gte=0),
                        name="community_tag_usage_non_negative",
                    ),
                ],
                "indexes": [
                    models.Index(
                        fields=["category", "is_promoted", "-usage_count"],
                        name="ctag_cat_promoted_usage_idx",
                    ),
                ],
            },
        ),
    ]
