from django.db import transaction
from rest_framework import serializers

from main.common.utils import lms_setting
from main.exceptions import BadRequest, Conflict
from main.models import ROLE_CHOICES, STUDENT, ClassList, Subject, TeacherAssignment, User


class UserSerializer(serializers.ModelSerializer):
    class_name = serializers.CharField(source='school_class.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = ['id', 'roll_number', 'full_name', 'role', 'class_name', 'date_joined']
        read_only_fields = ['id', 'roll_number', 'role', 'date_joined']


class ClassListSerializer(serializers.ModelSerializer):
    student_count = serializers.IntegerField(source='students.count', read_only=True)

    class Meta:
        model = ClassList
        fields = ['id', 'name', 'description', 'student_count']


class SubjectSerializer(serializers.ModelSerializer):
    class_name = serializers.CharField(source='school_class.name', read_only=True)

    class Meta:
        model = Subject
        fields = ['id', 'name', 'description', 'school_class', 'class_name']


class TeacherSerializer(serializers.ModelSerializer):
    subjects = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'roll_number', 'full_name', 'subjects']

    def get_subjects(self, obj):
        assignments = obj.teacher_assignments.select_related('subject__school_class')
        return [
            {
                'id': a.subject_id,
                'name': a.subject.name,
                'class_name': a.subject.school_class.name,
            }
            for a in assignments
        ]


class _ClassNameMixin:
    """Resolve the `class_name` input into a ClassList; students must have one."""

    def _resolve_class(self, attrs, role):
        class_name = attrs.pop('class_name', None)
        if role != STUDENT:
            return None
        if not class_name:
            raise BadRequest("Class is required for students")
        school_class = ClassList.objects.filter(name=class_name).first()
        if school_class is None:
            raise BadRequest(f"Class '{class_name}' does not exist")
        return school_class


class UserCreateSerializer(_ClassNameMixin, serializers.Serializer):
    roll_number = serializers.CharField(max_length=32)
    full_name = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=ROLE_CHOICES)
    class_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_roll_number(self, value):
        value = value.strip()
        if User.objects.filter(roll_number=value).exists():
            raise Conflict("Roll number already exists")
        return value

    def validate_password(self, value):
        min_length = lms_setting('MIN_PASSWORD_LENGTH')
        if len(value) < min_length:
            raise serializers.ValidationError(f"Password must be at least {min_length} characters long")
        return value

    def validate(self, attrs):
        attrs['school_class'] = self._resolve_class(attrs, attrs['role'])
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)

    def to_representation(self, instance):
        return UserSerializer(instance).data


class UserUpdateSerializer(_ClassNameMixin, serializers.Serializer):
    roll_number = serializers.CharField(max_length=32, required=False)
    full_name = serializers.CharField(max_length=150, required=False)
    class_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    new_password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)

    def validate_roll_number(self, value):
        value = value.strip()
        if User.objects.filter(roll_number=value).exclude(pk=self.instance.pk).exists():
            raise Conflict("Roll number already exists")
        return value

    def validate_new_password(self, value):
        min_length = lms_setting('MIN_PASSWORD_LENGTH')
        if value.strip() and len(value) < min_length:
            raise serializers.ValidationError(f"Password must be at least {min_length} characters long")
        return value

    def validate(self, attrs):
        if 'class_name' in attrs:
            attrs['school_class'] = self._resolve_class(attrs, self.instance.role)
        return attrs

    def update(self, instance, validated_data):
        new_password = validated_data.pop('new_password', '')
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if new_password.strip():
            instance.set_password(new_password)
        instance.save()
        return instance

    def to_representation(self, instance):
        return UserSerializer(instance).data


class SubjectAssignmentSerializer(serializers.Serializer):
    teacherId = serializers.IntegerField()
    subjectId = serializers.IntegerField()

    def validate(self, attrs):
        teacher = User.objects.teachers().filter(pk=attrs['teacherId']).first()
        if teacher is None:
            raise BadRequest("Teacher not found")
        subject = Subject.objects.filter(pk=attrs['subjectId']).first()
        if subject is None:
            raise BadRequest("Subject not found")
        attrs['teacher'], attrs['subject'] = teacher, subject
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        teacher, subject = validated_data['teacher'], validated_data['subject']
        if TeacherAssignment.objects.filter(teacher=teacher, subject=subject).exists():
            raise Conflict("Subject already assigned to this teacher")
        return TeacherAssignment.objects.create(teacher=teacher, subject=subject)
