# mc_core/common/middleware.py
from __future__ import annotations

import re

from django.utils.deprecation import MiddlewareMixin

from mc_core.common.api.exceptions import ensure_request_id

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (client X-Request-Id when well-formed, else generated)
    and echoes it back. Error envelopes reuse the same id.
    """

    HEADER_META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-Id"

    def process_request(self, request):
        incoming = request.META.get(self.HEADER_META_KEY, "")
        if incoming and _SAFE_ID.match(incoming):
            request.request_id = incoming
        ensure_request_id(request)

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.RESPONSE_HEADER] = rid
        return response
