import logging

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet, ReadOnlyModelViewSet
from rest_framework import mixins

from main.exceptions import Conflict, NotFound
from main.models import Chapter, Content, Quiz, Subject

from ..permissions import IsTeacher
from ..serializers.content_serializers import (
    ChapterSerializer,
    ContentSerializer,
    MaterialUploadSerializer,
)
from ..serializers.core_serializers import SubjectSerializer
from ..serializers.quiz_serializers import QuizCreateSerializer, QuizSerializer

logger = logging.getLogger(__name__)


def get_teacher_chapter(teacher, chapter_id):
    chapter = Chapter.objects.taught_by(teacher).filter(pk=chapter_id).first()
    if chapter is None:
        raise NotFound("Chapter not found or not assigned to you")
    return chapter


class TeacherSubjectViewSet(ReadOnlyModelViewSet):
    serializer_class = SubjectSerializer
    permission_classes = [IsTeacher]

    def get_queryset(self):
        return Subject.objects.taught_by(self.request.user).select_related('school_class').order_by(
            'school_class__name', 'name'
        )

    @action(detail=True, methods=['GET'])
    def materials(self, request, pk=None):
        subject = self.get_object()
        contents = (
            Content.objects.filter(chapter__subject=subject)
            .exclude(type=Content.TYPES.quiz)
            .select_related('chapter', 'uploaded_by')
        )
        return Response(ContentSerializer(contents, many=True).data)

    @action(detail=True, methods=['GET'])
    def quizzes(self, request, pk=None):
        subject = self.get_object()
        quizzes = Quiz.objects.filter(chapter__subject=subject).select_related('chapter')
        return Response(QuizSerializer(quizzes, many=True).data)


class TeacherChapterViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, GenericViewSet):
    """Chapters of one assigned subject, nested under teacher/subjects/{subject_pk}/."""
    serializer_class = ChapterSerializer
    permission_classes = [IsTeacher]

    def get_subject(self):
        subject = Subject.objects.taught_by(self.request.user).filter(pk=self.kwargs['subject_pk']).first()
        if subject is None:
            raise NotFound("Subject not found or not assigned to you")
        return subject

    def get_queryset(self):
        return Chapter.objects.filter(subject=self.get_subject()).order_by('order_index')

    def perform_create(self, serializer):
        subject = self.get_subject()
        try:
            with transaction.atomic():
                serializer.save(subject=subject, order_index=Chapter.next_order_index(subject))
        except IntegrityError as exc:
            raise Conflict("Chapter order changed concurrently; retry") from exc


class UploadMaterialView(APIView):
    permission_classes = [IsTeacher]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = MaterialUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        chapter = get_teacher_chapter(request.user, data['chapter_id'])

        content = Content.objects.create(
            chapter=chapter,
            title=data['title'],
            type=data['type'],
            file=data['file'],
            uploaded_by=request.user,
        )
        logger.info("Teacher %s uploaded content %s to chapter %s", request.user.pk, content.pk, chapter.pk)
        return Response(
            {
                'success': True,
                'data': ContentSerializer(content).data,
                'message': 'Material uploaded successfully',
            },
            status=status.HTTP_201_CREATED,
        )


class QuizCreateView(APIView):
    permission_classes = [IsTeacher]

    def post(self, request):
        serializer = QuizCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        chapter = get_teacher_chapter(request.user, serializer.validated_data['chapter_id'])
        quiz = serializer.save(chapter=chapter, created_by=request.user)
        logger.info("Teacher %s created quiz %s with %s questions", request.user.pk, quiz.pk, quiz.total_questions)
        return Response(
            {
                'success': True,
                'data': serializer.data,
                'message': 'Quiz created successfully',
            },
            status=status.HTTP_201_CREATED,
        )
