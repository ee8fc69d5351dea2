from rest_framework import serializers


class TagUsageStatSerializer(serializers.Serializer):
    tag = serializers.CharField()
    usage_count = serializers.IntegerField()
    is_promoted = serializers.BooleanField()
    created_at = serializers.DateTimeField()


class TagListSerializer(serializers.Serializer):
    category_name = serializers.CharField()
    tags = serializers.ListField(child=serializers.CharField())
    count = serializers.IntegerField()
