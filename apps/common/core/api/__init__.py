"""Common Core API Package."""
from .permissions import IsAdminOrReadOnly
from .handlers import custom_exception_handler
from .serializers import TimestampsMixin, ErrorResponseSerializer

__all__ = [
    'IsAdminOrReadOnly',
    'custom_exception_handler',
    'TimestampsMixin',
    'ErrorResponseSerializer',
]
