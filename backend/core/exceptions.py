"""
Custom exception handlers for consistent API error responses.
"""
import logging

from rest_framework import status, exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Domain failure that maps directly onto an error envelope."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = 'bad_request'

    def __init__(self, message, *, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationFailed(ServiceError):
    code = 'validation_error'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'forbidden'


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'


def error_response(code, message, status_code=status.HTTP_400_BAD_REQUEST, *, details=None, **extra):
    body = {'error': {'code': code, 'message': message}}
    if details:
        body['error']['details'] = details
    body.update(extra)
    return Response(body, status=status_code)


def service_error_response(exc: ServiceError):
    return error_response(exc.code, exc.message, exc.status_code, details=exc.details)


def _response_messages(response_data):
    if isinstance(response_data, dict) and 'detail' in response_data:
        return [str(response_data['detail'])]
    return _validation_messages(response_data)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error response format.

    Returns:
        Response with format:
        {
            "error": {
                "code": "error_code",
                "message": "User-friendly error message",
                "details": {...}  # Optional field-specific errors
            }
        }
    """
    if isinstance(exc, ServiceError):
        return service_error_response(exc)

    response = exception_handler(exc, context)

    if response is not None:
        # Auth failures always return 401 so clients can re-auth.
        if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
            response.status_code = status.HTTP_401_UNAUTHORIZED

        messages = _response_messages(response.data)
        custom_response_data = {
            'error': {
                'code': get_error_code(exc, response.status_code),
                'message': messages[0] if messages else 'An error occurred',
            }
        }
        if len(messages) > 1:
            custom_response_data['error']['messages'] = messages

        if isinstance(response.data, dict):
            details = {}
            for field, errors in response.data.items():
                if field == 'detail':
                    continue
                if isinstance(errors, list):
                    details[field] = errors[0] if errors else 'Invalid value'
                else:
                    details[field] = str(errors)
            if details:
                custom_response_data['error']['details'] = details

        response.data = custom_response_data
    else:
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        response = Response(
            {
                'error': {
                    'code': 'internal_server_error',
                    'message': 'An unexpected error occurred. Please try again later.',
                }
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response


def get_error_code(exc, status_code):
    """Generate error code from exception."""
    detail_code = getattr(getattr(exc, 'detail', None), 'code', None)
    if detail_code:
        return detail_code
    if hasattr(exc, 'default_code'):
        return exc.default_code

    code_map = {
        400: 'bad_request',
        401: 'unauthorized',
        403: 'forbidden',
        404: 'not_found',
        405: 'method_not_allowed',
        409: 'conflict',
        422: 'validation_error',
        429: 'too_many_requests',
        500: 'internal_server_error',
    }
    return code_map.get(status_code, 'error')


def _validation_messages(errors):
    """Return a list of human-readable validation error messages.

    Example input:
      {"salaryMin": ["A valid number is required."], "title": ["This field is required."]}
    Output list:
      ["SalaryMin: A valid number is required.", "Title: This field is required."]
    """
    messages = []
    if isinstance(errors, dict):
        for field, err in errors.items():
            if isinstance(err, dict):
                messages.extend(_validation_messages(err))
                continue
            msg = str(err[0]) if isinstance(err, (list, tuple)) and err else str(err)
            if field == 'non_field_errors':
                messages.append(msg)
            else:
                field_label = str(field).replace('_', ' ')
                messages.append(f"{field_label[:1].upper()}{field_label[1:]}: {msg}")
    elif isinstance(errors, (list, tuple)):
        messages.extend(str(e) for e in errors if e)
    elif errors:
        messages.append(str(errors))
    return messages


def validation_error_response(errors):
    msgs = _validation_messages(errors)
    return Response(
        {
            'error': {
                'code': 'validation_error',
                'message': (msgs[0] if msgs else 'Validation error'),
                'messages': msgs,
                'details': errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )
