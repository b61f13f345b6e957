from rest_framework_simplejwt.authentication import JWTAuthentication

from main.common.utils import lms_setting


class CookieJWTAuthentication(JWTAuthentication):
    """Bearer header first, then the httpOnly session cookie set at login."""

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            raw_token = request.COOKIES.get(lms_setting("AUTH_COOKIE")) or None

        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
