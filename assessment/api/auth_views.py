"""
Authentication Views

JWT endpoints of the assessment API. Tokens are delivered as HTTP-only
cookies; ``backend.custom_auth.JWTAuthentication`` reads the access token from
the cookie and falls back to the Authorization header.

Views:
- CookieTokenObtainPairView: Login, sets access/refresh cookies
- CookieTokenRefreshView: Refresh from the refresh cookie
- LogoutView: Blacklist the refresh token and clear cookies

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

logger = logging.getLogger(__name__)

REFRESH_COOKIE_NAME = "refresh_token"


def _set_token_cookies(response: Response, access=None, refresh=None) -> Response:
    access_cookie = getattr(settings, "JWT_ACCESS_COOKIE_NAME", "access_token")
    secure = not settings.DEBUG
    if refresh:
        response.set_cookie(
            REFRESH_COOKIE_NAME,
            refresh,
            httponly=True,
            secure=secure,
            samesite="Lax",
            path="/",
            max_age=settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"],
        )
    if access:
        response.set_cookie(
            access_cookie,
            access,
            httponly=True,
            secure=secure,
            samesite="Lax",
            path="/",
            max_age=settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"],
        )
    return response


class CookieTokenObtainPairView(TokenObtainPairView):
    """Login endpoint; moves the token pair from the body into cookies."""

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == status.HTTP_200_OK:
            refresh = response.data.pop("refresh", None)
            access = response.data.pop("access", None)
            _set_token_cookies(response, access=access, refresh=refresh)
            response.data["success"] = True
        return response


class CookieTokenRefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME) or request.data.get("refresh")
        if not refresh_token:
            return Response(
                {"detail": "Refresh token not provided"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        response = Response({"success": True}, status=status.HTTP_200_OK)
        return _set_token_cookies(response, access=data.get("access"), refresh=data.get("refresh"))


class LogoutView(APIView):
    def post(self, request):
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME)
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.info(f"Refresh token beim Logout ungültig: {e}")

        response = Response({"detail": "Successfully logged out."}, status=status.HTTP_205_RESET_CONTENT)
        response.delete_cookie(REFRESH_COOKIE_NAME)
        response.delete_cookie(getattr(settings, "JWT_ACCESS_COOKIE_NAME", "access_token"))
        return response
