"""Common Core - Domain Exceptions."""
from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    code: str = 'DOMAIN_ERROR'
    default_message: str = 'Произошла ошибка'
    http_status: int = 400

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details or {}
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        result = {'code': self.code, 'message': self.message}
        if self.details:
            result['details'] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# Validation Errors
class ValidationError(DomainException):
    code = 'VALIDATION_ERROR'
    default_message = 'Некорректные данные'
    http_status = 400

    def __init__(self, message: Optional[str] = None, field_errors: Optional[Dict[str, List[str]]] = None, **kwargs):
        super().__init__(message, **kwargs)
        if field_errors:
            self.details['field_errors'] = field_errors


class InvalidAddress(ValidationError):
    code = 'INVALID_ADDRESS'
    default_message = 'Некорректный адрес'

    def __init__(self, violations: Optional[List[Any]] = None, **kwargs):
        violations = list(violations or [])
        field_errors: Dict[str, List[str]] = {}
        for violation in violations:
            field_errors.setdefault(violation.field, []).append(violation.message)
        super().__init__(field_errors=field_errors or None, **kwargs)
        self.violations = violations
        if violations:
            self.details['violations'] = [v.to_dict() for v in violations]


class InvalidParent(ValidationError):
    code = 'INVALID_PARENT'
    default_message = 'Недопустимый родительский элемент'

    def __init__(self, kind: str = '', parent_kind: Optional[str] = None, **kwargs):
        message = kwargs.pop('message', None) or f'Элемент типа {kind} не может находиться внутри {parent_kind or "корня"}'
        super().__init__(message=message, details={'kind': kind, 'parent_kind': parent_kind}, **kwargs)


class UnsupportedLocale(ValidationError):
    code = 'UNSUPPORTED_LOCALE'
    default_message = 'Язык не поддерживается'


# Not Found Errors
class NotFoundError(DomainException):
    code = 'NOT_FOUND'
    default_message = 'Ресурс не найден'
    http_status = 404


class LocationNotFound(NotFoundError):
    code = 'LOCATION_NOT_FOUND'
    default_message = 'Населённый пункт не найден'


class LocaleNotFound(NotFoundError):
    code = 'LOCALE_NOT_FOUND'
    default_message = 'Locale not found'


class AddressNotFound(NotFoundError):
    code = 'ADDRESS_NOT_FOUND'
    default_message = 'Адрес не найден'


# Business Rule Violations
class BusinessRuleViolation(DomainException):
    code = 'BUSINESS_RULE_VIOLATION'
    default_message = 'Нарушено бизнес-правило'
    http_status = 422


class InvalidStateTransition(BusinessRuleViolation):
    code = 'INVALID_STATE_TRANSITION'
    default_message = 'Недопустимый переход состояния'

    def __init__(self, from_state: str = '', to_state: str = '', **kwargs):
        message = kwargs.pop('message', None) or f'Невозможно перейти из {from_state} в {to_state}'
        super().__init__(message=message, details={'from_state': from_state, 'to_state': to_state}, **kwargs)
