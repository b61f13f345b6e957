import logging

import pandas as pd
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from main.exceptions import BadRequest, NotFound
from main.filter import UserFilter
from main.models import ClassList, Subject, TeacherAssignment, User

from ..permissions import IsAdmin
from ..serializers.core_serializers import (
    ClassListSerializer,
    SubjectAssignmentSerializer,
    SubjectSerializer,
    TeacherSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = ['roll_number', 'full_name', 'password', 'role', 'class_name']


class UserViewSet(ModelViewSet):
    queryset = User.objects.select_related('school_class').order_by('roll_number')
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = UserFilter
    search_fields = ['roll_number', 'full_name']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        if self.action == 'partial_update':
            return UserUpdateSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Admin %s created %s %s", request.user.pk, user.role, user.roll_number)
        return Response(
            {
                'success': True,
                'data': serializer.data,
                'message': 'User created successfully',
            },
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({
            'success': True,
            'data': serializer.data,
            'message': 'User updated successfully',
        })

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.pk == request.user.pk:
            raise BadRequest("You cannot delete your own account")
        roll_number = instance.roll_number
        instance.delete()
        logger.info("Admin %s deleted user %s", request.user.pk, roll_number)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['POST'], parser_classes=[MultiPartParser, FormParser])
    def import_users(self, request):
        """Bulk-create users from a CSV upload; all rows or none."""
        if 'file' not in request.FILES:
            raise BadRequest("No file provided")

        try:
            frame = pd.read_csv(request.FILES['file'], dtype=str, keep_default_na=False)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
            logger.info("Rejected user import from admin %s: %s", request.user.pk, exc)
            raise BadRequest("Could not read the uploaded CSV") from exc
        missing = [col for col in IMPORT_COLUMNS if col not in frame.columns]
        if missing:
            raise BadRequest(f"Missing required columns. Required: {', '.join(IMPORT_COLUMNS)}")

        created = []
        with transaction.atomic():
            for index, row in frame.iterrows():
                serializer = UserCreateSerializer(data={col: row[col].strip() for col in IMPORT_COLUMNS})
                if not serializer.is_valid():
                    raise BadRequest(f"Invalid data in row {index + 1}: {serializer.errors}")
                created.append(serializer.save())

        logger.info("Admin %s imported %s users", request.user.pk, len(created))
        return Response(
            {
                'success': True,
                'data': UserSerializer(created, many=True).data,
                'message': f'{len(created)} users imported successfully',
            },
            status=status.HTTP_201_CREATED,
        )


class ClassListViewSet(ModelViewSet):
    queryset = ClassList.objects.all()
    serializer_class = ClassListSerializer
    permission_classes = [IsAdmin]
    parser_classes = (JSONParser,)


class SubjectViewSet(ModelViewSet):
    queryset = Subject.objects.select_related('school_class')
    serializer_class = SubjectSerializer
    permission_classes = [IsAdmin]
    filterset_fields = ['school_class']


class TeacherListView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        teachers = User.objects.teachers().order_by('full_name')
        return Response(TeacherSerializer(teachers, many=True).data)


class ClassStudentsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, class_name):
        school_class = ClassList.objects.filter(name=class_name).first()
        if school_class is None:
            raise NotFound("Class not found")
        students = User.objects.students().in_class(school_class).order_by('roll_number')
        return Response(UserSerializer(students, many=True).data)


class AssignSubjectView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = SubjectAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = serializer.save()
        return Response(
            {
                'success': True,
                'message': 'Subject assigned successfully',
                'data': {'id': assignment.pk, 'teacherId': assignment.teacher_id, 'subjectId': assignment.subject_id},
            },
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request):
        serializer = SubjectAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted, _ = TeacherAssignment.objects.filter(
            teacher=serializer.validated_data['teacher'],
            subject=serializer.validated_data['subject'],
        ).delete()
        if not deleted:
            raise NotFound("Assignment not found")
        return Response({'success': True, 'message': 'Subject unassigned successfully'})
