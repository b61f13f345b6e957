from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from main.analytics.engagement import quiz_statistics, record_content_view
from main.models import STUDENT, ContentView, StudentAttempt
from main.tests.factories import SchoolFixtureMixin, create_content, create_quiz, create_test_user


class RecordContentViewTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.content = create_content(self.chapter)

    def test_first_view_creates_counters(self):
        view = record_content_view(self.student, self.content, time_spent=40, completion=25)

        self.assertEqual(view.view_count, 1)
        self.assertEqual(view.total_time_spent, 40)
        self.assertEqual(view.completion_percentage, 25)

    def test_repeat_views_accumulate_and_keep_best_completion(self):
        earlier = timezone.now() - timedelta(hours=1)
        record_content_view(self.student, self.content, time_spent=40, completion=70, now=earlier)
        view = record_content_view(self.student, self.content, time_spent=20, completion=30)

        self.assertEqual(ContentView.objects.filter(content=self.content, user=self.student).count(), 1)
        self.assertEqual(view.view_count, 2)
        self.assertEqual(view.total_time_spent, 60)
        self.assertEqual(view.completion_percentage, 70)
        self.assertGreater(view.last_accessed, earlier)

    def test_missing_completion_counts_as_zero(self):
        view = record_content_view(self.student, self.content)
        self.assertEqual(view.completion_percentage, 0)


class QuizStatisticsTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.quiz = create_quiz(self.chapter, questions=((0, 5), (1, 5)))

    def test_no_attempts(self):
        stats = quiz_statistics(self.quiz)

        self.assertEqual(stats['totalAttempts'], 0)
        self.assertEqual(stats['averageScore'], 0)
        self.assertEqual(stats['passRate'], 0)

    def test_pass_rate_and_averages(self):
        scores = [10, 6, 5]
        for n, score in enumerate(scores):
            student = create_test_user(STUDENT, roll_number=f'S{n}', school_class=self.school_class)
            StudentAttempt.objects.create(student=student, quiz=self.quiz, score=score, total_marks=10)

        stats = quiz_statistics(self.quiz)

        self.assertEqual(stats['quizId'], self.quiz.pk)
        self.assertEqual(stats['totalAttempts'], 3)
        self.assertEqual(stats['averageScore'], 7.0)
        self.assertEqual(stats['averagePercentage'], 70)
        self.assertEqual(stats['passRate'], 67)
