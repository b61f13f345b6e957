from django.contrib.auth import authenticate
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from main.exceptions import Unauthorized


class LMSTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Customizes JWT default Serializer to add more information about user"""
    username_field = "roll_number"

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['roll_number'] = user.roll_number
        token['full_name'] = user.full_name
        token['role'] = user.role
        token['class'] = user.class_name
        return token


class LoginSerializer(serializers.Serializer):
    rollNumber = serializers.CharField(max_length=32, trim_whitespace=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    default_error_messages = {
        'invalid_credentials': _("Invalid credentials"),
    }

    def validate(self, attrs):
        user = authenticate(
            self.context.get('request'),
            roll_number=attrs['rollNumber'],
            password=attrs['password'],
        )
        if user is None:
            raise Unauthorized(self.error_messages['invalid_credentials'])
        attrs['user'] = user
        return attrs

    def get_tokens(self):
        refresh = LMSTokenObtainPairSerializer.get_token(self.validated_data['user'])
        return {'refresh': str(refresh), 'access': str(refresh.access_token)}
