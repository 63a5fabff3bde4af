"""Common Core API - Serializer Mixins."""
from rest_framework import serializers


class TimestampsMixin(serializers.Serializer):
    """Mixin that adds timestamp fields."""
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response."""
    code = serializers.CharField()
    message = serializers.CharField()
    details = serializers.DictField(required=False)
