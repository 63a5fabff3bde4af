"""Common Core - Exception Handler.

Every error leaves the API as {"code", "message", "details"?}. Serializer
input errors are reshaped into the same body as domain ValidationErrors so
clients read `details.field_errors` in both cases.
"""
import logging
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler
from apps.common.core.exceptions import DomainException, ValidationError

logger = logging.getLogger('apps.core')


def _field_errors(detail):
    if isinstance(detail, dict):
        return {field: [str(e) for e in (errors if isinstance(errors, list) else [errors])] for field, errors in detail.items()}
    return {'non_field_errors': [str(e) for e in (detail if isinstance(detail, list) else [detail])]}


def custom_exception_handler(exc, context):
    """Custom exception handler for DRF."""
    if isinstance(exc, DomainException):
        if exc.http_status >= 500:
            logger.error(f"Domain error: {exc}")
        else:
            logger.info(f"Rejected {context['request'].method} {context['request'].path}: {exc}")
        return Response(exc.to_dict(), status=exc.http_status)

    if isinstance(exc, exceptions.ValidationError):
        error = ValidationError(field_errors=_field_errors(exc.detail))
        return Response(error.to_dict(), status=status.HTTP_400_BAD_REQUEST)

    response = drf_exception_handler(exc, context)
    if response is not None:
        if isinstance(response.data, dict):
            response.data['code'] = getattr(exc, 'default_code', 'ERROR')
        return response

    if isinstance(exc, Http404):
        return Response({'code': 'NOT_FOUND', 'message': str(exc) or 'Ресурс не найден'}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, PermissionDenied):
        return Response({'code': 'PERMISSION_DENIED', 'message': str(exc) or 'Доступ запрещён'}, status=status.HTTP_403_FORBIDDEN)

    logger.exception('Unhandled exception', extra={'view': context['view'].__class__.__name__, 'request_path': context['request'].path})
    return Response({'code': 'INTERNAL_ERROR', 'message': 'Внутренняя ошибка сервера'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
