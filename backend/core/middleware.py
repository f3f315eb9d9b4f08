"""
Request middleware.
"""
import logging

logger = logging.getLogger(__name__)

UNTRUSTED_IDENTITY_HEADERS = ('HTTP_X_USER_ID', 'HTTP_X_COMPANY_ID')


class UntrustedIdentityHeaderMiddleware:
    """
    Drop ``x-user-id`` / ``x-company-id`` request headers.

    Identity is derived from the verified session token only, so these headers
    are removed before any view can read them.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        for key in UNTRUSTED_IDENTITY_HEADERS:
            if key in request.META:
                logger.warning(
                    'Ignoring untrusted identity header %s on %s %s',
                    key, request.method, request.path,
                )
                del request.META[key]
        return self.get_response(request)
