from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from django.core.exceptions import ValidationError

from main.common.managers import UserQuerySet

__all__ = ["ADMIN", "TEACHER", "STUDENT", "ROLE_CHOICES", "UserManager", "User"]

ADMIN = "admin"
TEACHER = "teacher"
STUDENT = "student"

ROLE_CHOICES = (
    (STUDENT, _("Student")),
    (TEACHER, _("Teacher")),
    (ADMIN, _("Admin")),
)


class UserManager(BaseUserManager.from_queryset(UserQuerySet)):
    def create_user(self, roll_number, password=None, **extra_fields):
        if not roll_number:
            raise ValueError('The roll number must be set')
        user = self.model(roll_number=roll_number.strip(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, roll_number, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(roll_number, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    School account, identified by roll number:
      - **role** drives every permission check (admin / teacher / student)
      - **school_class** is required for students and ignored for everyone else
    """

    USERNAME_FIELD = 'roll_number'
    REQUIRED_FIELDS = ['full_name']

    roll_number = models.CharField(
        _('roll number'),
        max_length=32,
        unique=True,
        error_messages={'unique': _("A user with that roll number already exists.")},
    )
    full_name = models.CharField(_('full name'), max_length=150)
    role = models.CharField(max_length=10, default=STUDENT, choices=ROLE_CHOICES)
    school_class = models.ForeignKey(
        'main.ClassList',
        on_delete=models.SET_NULL,
        related_name='students',
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(_('active'), default=True)
    is_staff = models.BooleanField(_('staff status'), default=False)
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    class Meta:
        ordering = ['roll_number']
        indexes = [
            models.Index(fields=['role', 'school_class'], name='user_role_class_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.roll_number})"

    def clean(self):
        super().clean()
        if self.is_student and not self.school_class_id:
            raise ValidationError({'school_class': _("Students must belong to a class.")})
        if not self.is_student:
            self.school_class = None

    @property
    def is_admin(self):
        return self.role == ADMIN

    @property
    def is_teacher(self):
        return self.role == TEACHER

    @property
    def is_student(self):
        return self.role == STUDENT

    @property
    def class_name(self):
        return self.school_class.name if self.school_class_id else None

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.full_name.split(" ", 1)[0] if self.full_name else self.roll_number
