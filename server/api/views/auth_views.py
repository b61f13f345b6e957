import logging

from django.contrib.auth import user_logged_in
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from main.common.utils import lms_setting

from ..serializers.auth_serializers import LoginSerializer
from ..serializers.core_serializers import UserSerializer

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """Exchange roll number + password for a JWT pair and an httpOnly session cookie."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        tokens = serializer.get_tokens()
        user_logged_in.send(sender=user.__class__, request=request, user=user)
        logger.info("User %s logged in", user.roll_number)

        response = Response(
            {
                'success': True,
                'user': UserSerializer(user).data,
                **tokens,
            },
            status=status.HTTP_200_OK,
        )
        response.set_cookie(
            lms_setting('AUTH_COOKIE'),
            tokens['access'],
            max_age=lms_setting('AUTH_COOKIE_MAX_AGE'),
            httponly=True,
            secure=lms_setting('AUTH_COOKIE_SECURE'),
            samesite='Lax',
        )
        return response


class LogoutView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        response = Response({'success': True, 'message': 'Logged out'})
        response.delete_cookie(lms_setting('AUTH_COOKIE'), samesite='Lax')
        return response
