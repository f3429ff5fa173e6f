# mc_core/accounts/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from mc_core.accounts.errors import auth_message
from mc_core.accounts.session import SessionActivityTracker


class SessionExpired(AuthenticationFailed):
    default_detail = auth_message("session-expired")
    default_code = "session_expired"
    clear_auth_cookies = True


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    After the user is known, the idle-session window is checked and refreshed.
    """

    tracker_class = SessionActivityTracker

    def authenticate(self, request):
        header = self.get_header(request)
        if header:
            auth_result = super().authenticate(request)
            if auth_result is None:
                return None
            user, token = auth_result
        else:
            cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "mc_access")
            raw_token = request.COOKIES.get(cookie_name)
            if not raw_token:
                return None
            token = self.get_validated_token(raw_token)
            user = self.get_user(token)

        if not self.tracker_class().check_and_touch(user.pk):
            raise SessionExpired()
        return user, token
