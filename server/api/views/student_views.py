from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from main.exceptions import NotFound
from main.models import Chapter, Quiz, StudentAttempt, Subject

from ..permissions import IsStudent
from ..serializers.content_serializers import ChapterSerializer
from ..serializers.core_serializers import SubjectSerializer
from ..serializers.quiz_serializers import QuizSerializer


class StudentSubjectViewSet(ReadOnlyModelViewSet):
    serializer_class = SubjectSerializer
    permission_classes = [IsStudent]

    def get_queryset(self):
        return Subject.objects.visible_to(self.request.user).select_related('school_class').order_by('name')

    @action(detail=True, methods=['GET'])
    def quizzes(self, request, pk=None):
        """Quizzes of the subject, each flagged with whether this student has attempted it."""
        subject = self.get_object()
        quizzes = Quiz.objects.filter(chapter__subject=subject).select_related('chapter')
        attempted = set(
            StudentAttempt.objects.filter(student=request.user, quiz__in=quizzes).values_list('quiz_id', flat=True)
        )
        data = QuizSerializer(quizzes, many=True).data
        for item in data:
            item['attempted'] = item['id'] in attempted
        return Response(data)


class StudentChapterViewSet(ReadOnlyModelViewSet):
    serializer_class = ChapterSerializer
    permission_classes = [IsStudent]

    def get_queryset(self):
        subject = Subject.objects.visible_to(self.request.user).filter(pk=self.kwargs['subject_pk']).first()
        if subject is None:
            raise NotFound("Subject not found")
        return Chapter.objects.filter(subject=subject).order_by('order_index')
