import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

logger = logging.getLogger(__name__)

UserModel = get_user_model()


class RollNumberBackend(ModelBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate by roll number. Accepts it as `username`, `roll_number`
        or `rollNumber` so the admin site and the API share one backend.
        """
        roll_number = username or kwargs.get(UserModel.USERNAME_FIELD) or kwargs.get("rollNumber")
        if roll_number is None or password is None:
            return None
        roll_number = str(roll_number).strip()

        try:
            user = UserModel._default_manager.get_by_natural_key(roll_number)
        except UserModel.DoesNotExist:
            # Run the default password hasher once to reduce the timing
            # difference between an existing and a nonexistent user.
            UserModel().set_password(password)
            logger.info("Login failed for unknown roll number %s", roll_number)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info("Login failed for roll number %s", roll_number)
        return None
