from rest_framework.response import Response
from rest_framework.views import APIView

from main.analytics.engagement import quiz_statistics
from main.exceptions import AlreadyAttempted, BadRequest, NotFound
from main.models import Quiz
from main.quiz.evaluator import get_quiz_for_student, has_attempted, record_quiz_start, submit_attempt

from ..permissions import IsStudent, IsTeacherOrAdmin
from ..serializers.dashboard_serializers import QuizStatisticsSerializer
from ..serializers.quiz_serializers import QuizDetailSerializer, QuizSubmitSerializer


class QuizDetailView(APIView):
    """
    Students get the quiz without the answer key, once, and opening it starts
    the clock. Teachers and admins see the full quiz they can access.
    """

    def get(self, request, quiz_id):
        user = request.user
        if user.is_student:
            quiz = get_quiz_for_student(user, quiz_id)
            if has_attempted(user, quiz):
                raise AlreadyAttempted()
            start = record_quiz_start(user, quiz)
            data = QuizDetailSerializer(quiz, context={'with_answers': False}).data
            data['startedAt'] = start.started_at
            return Response(data)

        quiz = Quiz.objects.visible_to(user).select_related('chapter').filter(pk=quiz_id).first()
        if quiz is None:
            raise NotFound("Quiz not found")
        return Response(QuizDetailSerializer(quiz, context={'with_answers': True}).data)


class QuizSubmitView(APIView):
    permission_classes = [IsStudent]

    def post(self, request):
        serializer = QuizSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            raise BadRequest("Missing quiz ID or answers")
        result = submit_attempt(
            request.user,
            serializer.validated_data['quizId'],
            serializer.validated_data['answers'],
        )
        return Response(result.as_dict())


class QuizStatsView(APIView):
    permission_classes = [IsTeacherOrAdmin]

    def get(self, request, quiz_id):
        quiz = Quiz.objects.visible_to(request.user).filter(pk=quiz_id).first()
        if quiz is None:
            raise NotFound("Quiz not found")
        return Response(QuizStatisticsSerializer(quiz_statistics(quiz)).data)
