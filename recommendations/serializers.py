from rest_framework import serializers
from recommendations.models import Category, Entity, Recommendation
from recommendations.services.lifecycle import clean_tags
from users.serializers import PublicUserSerializer

MAX_TAGS = 20
MAX_TAG_LENGTH = 50


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "display_name",
            "description",
            "icon",
        ]


class EntitySerializer(serializers.ModelSerializer):
    category = CategorySerializer()

    class Meta:
        model = Entity
        fields = ["id", "name", "category"]


class RecommendationSerializer(serializers.ModelSerializer):
    user = PublicUserSerializer()
    entity = EntitySerializer()

    class Meta:
        model = Recommendation
        fields = [
            "id",
            "user",
            "entity",
            "tags",
            "link",
            "image_url",
            "rating",
            "created_at",
            "updated_at",
        ]


class TagListField(serializers.ListField):
    child = serializers.CharField(max_length=MAX_TAG_LENGTH, allow_blank=True)

    def to_internal_value(self, data):
        tags = clean_tags(super().to_internal_value(data))
        if len(tags) > MAX_TAGS:
            raise serializers.ValidationError(f"At most {MAX_TAGS} tags are allowed.")
        return tags


class RecommendationCreateSerializer(serializers.Serializer):
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.active(),
        source="category",
    )
    entity_id = serializers.IntegerField(required=False)
    entity_name = serializers.CharField(max_length=255, required=False, allow_blank=False)
    tags = TagListField(required=False, default=list)
    link = serializers.URLField(max_length=500, required=False, allow_null=True)
    image_url = serializers.URLField(max_length=500, required=False, allow_null=True)
    rating = serializers.IntegerField(min_value=0, max_value=5, required=False, default=0)

    def validate(self, attrs):
        entity_id = attrs.pop("entity_id", None)
        entity_name = attrs.pop("entity_name", None)
        category = attrs["category"]

        if entity_id is None and not entity_name:
            raise serializers.ValidationError(
                "Either entity_name or entity_id is required"
            )

        if entity_id is not None:
            entity = Entity.objects.filter(id=entity_id).select_related("category").first()
            if entity is None:
                raise serializers.ValidationError({"entity_id": "Entity does not exist"})
            if entity.category_id != category.id:
                raise serializers.ValidationError(
                    {"entity_id": "Entity belongs to another category"}
                )
            attrs["entity"] = entity
        else:
            attrs["entity_name"] = entity_name
        return attrs

    def create(self, validated_data):
        category = validated_data.pop("category")
        entity = validated_data.pop("entity", None)
        entity_name = validated_data.pop("entity_name", None)

        if entity is None:
            entity, _ = Entity.objects.get_or_create_named(entity_name, category)

        return Recommendation.objects.create(
            user=self.context["request"].user,
            entity=entity,
            **validated_data,
        )


class RecommendationUpdateSerializer(serializers.ModelSerializer):
    tags = TagListField(required=False)

    class Meta:
        model = Recommendation
        fields = ["tags", "link", "image_url", "rating"]
