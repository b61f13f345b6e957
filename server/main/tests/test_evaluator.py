from datetime import timedelta
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone

from main.exceptions import (
    AlreadyAttempted,
    BadRequest,
    DuplicateAttempt,
    NotFound,
    QuizTimeExpired,
    Unauthorized,
)
from main.models import Chapter, QuizStart, StudentAttempt, Subject
from main.quiz.evaluator import (
    FAILED_MESSAGE,
    PASSED_MESSAGE,
    classify,
    record_quiz_start,
    score_answers,
    submit_attempt,
)
from main.tests.factories import SchoolFixtureMixin, create_quiz


class ScoringTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.quiz = create_quiz(self.chapter, questions=((0, 2), (1, 3), (3, 5)))
        self.questions = list(self.quiz.questions.all())

    def test_total_marks_is_sum_of_question_marks(self):
        score, total = score_answers(self.questions, {})
        self.assertEqual(score, 0)
        self.assertEqual(total, 10)

    def test_only_exact_matches_earn_marks(self):
        q1, q2, q3 = self.questions
        answers = {str(q1.pk): 0, str(q2.pk): 2, str(q3.pk): 3}
        self.assertEqual(score_answers(self.questions, answers), (7, 10))

    def test_integer_keys_are_accepted(self):
        q1, q2, q3 = self.questions
        self.assertEqual(score_answers(self.questions, {q1.pk: 0, q2.pk: 1}), (5, 10))

    def test_null_missing_and_unknown_answers_earn_nothing(self):
        q1, _, _ = self.questions
        answers = {str(q1.pk): None, '999999': 3}
        score, total = score_answers(self.questions, answers)
        self.assertEqual(score, 0)
        self.assertLessEqual(score, total)

    def test_booleans_are_not_option_indexes(self):
        q1, q2, _ = self.questions
        # True == 1 in Python; the second question's key is 1
        self.assertEqual(score_answers(self.questions, {str(q2.pk): True, str(q1.pk): False}), (0, 10))


class ClassifyTests(TestCase):
    def test_exactly_sixty_percent_passes(self):
        result = classify(3, 5)
        self.assertEqual(result.percentage, 60)
        self.assertTrue(result.passed)
        self.assertEqual(result.message, PASSED_MESSAGE)

    def test_below_sixty_percent_fails(self):
        result = classify(59, 100)
        self.assertFalse(result.passed)
        self.assertEqual(result.message, FAILED_MESSAGE)

    def test_zero_total_is_zero_percent_and_fails(self):
        result = classify(0, 0)
        self.assertEqual(result.percentage, 0)
        self.assertFalse(result.passed)

    def test_exact_half_percentage_rounds_up(self):
        result = classify(23, 40)
        self.assertEqual(result.percentage, 58)
        self.assertFalse(result.passed)

    @override_settings(LMS={'PASS_PERCENTAGE': 75})
    def test_pass_mark_comes_from_settings(self):
        self.assertFalse(classify(7, 10).passed)


class SubmitAttemptTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.quiz = create_quiz(self.chapter, created_by=self.teacher)
        self.q1, self.q2, self.q3 = self.quiz.questions.all()

    def answers(self, a1=0, a2=1, a3=2):
        return {str(self.q1.pk): a1, str(self.q2.pk): a2, str(self.q3.pk): a3}

    def test_two_of_three_correct_passes_at_67(self):
        result = submit_attempt(self.student, self.quiz.pk, self.answers(a3=0))

        self.assertEqual(result.score, 2)
        self.assertEqual(result.total_marks, 3)
        self.assertEqual(result.percentage, 67)
        self.assertTrue(result.passed)
        self.assertEqual(result.message, PASSED_MESSAGE)

        attempt = StudentAttempt.objects.get(student=self.student, quiz=self.quiz)
        self.assertEqual(attempt.pk, result.attempt_id)
        self.assertEqual(attempt.score, 2)
        self.assertEqual(attempt.answers[str(self.q3.pk)], 0)

    def test_forty_mark_quiz_rounds_half_up(self):
        quiz = create_quiz(self.chapter, title='Forty marks', questions=((0, 20), (1, 3), (2, 17)))
        q1, q2, q3 = quiz.questions.all()

        result = submit_attempt(self.student, quiz.pk, {str(q1.pk): 0, str(q2.pk): 1, str(q3.pk): 0})

        self.assertEqual((result.score, result.total_marks), (23, 40))
        self.assertEqual(result.percentage, 58)
        self.assertFalse(result.passed)
        self.assertEqual(StudentAttempt.objects.get(pk=result.attempt_id).percentage, 58)

    def test_answers_are_stored_as_submitted(self):
        answers = {str(self.q1.pk): '0', str(self.q2.pk): 1, str(self.q3.pk): None}

        result = submit_attempt(self.student, self.quiz.pk, answers)

        self.assertEqual(result.score, 1)
        attempt = StudentAttempt.objects.get(pk=result.attempt_id)
        self.assertEqual(attempt.answers, answers)

    def test_second_submission_is_rejected_and_first_is_kept(self):
        submit_attempt(self.student, self.quiz.pk, self.answers(a2=3, a3=3))

        with self.assertRaises(AlreadyAttempted):
            submit_attempt(self.student, self.quiz.pk, self.answers())

        attempts = StudentAttempt.objects.filter(student=self.student, quiz=self.quiz)
        self.assertEqual(attempts.count(), 1)
        self.assertEqual(attempts.get().score, 1)

    def test_race_past_the_precheck_reports_duplicate(self):
        submit_attempt(self.student, self.quiz.pk, self.answers())

        with mock.patch('main.quiz.evaluator.has_attempted', return_value=False):
            with self.assertRaises(DuplicateAttempt) as ctx:
                submit_attempt(self.student, self.quiz.pk, self.answers())

        self.assertIsInstance(ctx.exception, AlreadyAttempted)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(StudentAttempt.objects.filter(quiz=self.quiz).count(), 1)

    def test_submission_after_time_limit_is_rejected(self):
        now = timezone.now()
        QuizStart.objects.create(student=self.student, quiz=self.quiz, started_at=now - timedelta(minutes=31))

        with self.assertRaises(QuizTimeExpired):
            submit_attempt(self.student, self.quiz.pk, self.answers(), now=now)

        self.assertFalse(StudentAttempt.objects.filter(quiz=self.quiz).exists())

    def test_submission_within_grace_period_is_accepted(self):
        now = timezone.now()
        QuizStart.objects.create(
            student=self.student, quiz=self.quiz, started_at=now - timedelta(minutes=30, seconds=10),
        )

        result = submit_attempt(self.student, self.quiz.pk, self.answers(), now=now)

        self.assertEqual(result.percentage, 100)
        attempt = StudentAttempt.objects.get(pk=result.attempt_id)
        self.assertIsNotNone(attempt.started_at)

    def test_submission_without_recorded_start_is_scored(self):
        with self.assertLogs('main.quiz.evaluator', level='WARNING'):
            result = submit_attempt(self.student, self.quiz.pk, self.answers(a1=3, a2=3, a3=3))

        self.assertEqual(result.score, 0)
        self.assertFalse(result.passed)
        self.assertEqual(result.message, FAILED_MESSAGE)

    def test_teacher_cannot_submit(self):
        with self.assertRaises(Unauthorized):
            submit_attempt(self.teacher, self.quiz.pk, self.answers())

    def test_quiz_of_another_class_is_not_found(self):
        subject = Subject.objects.create(name='Physics', school_class=self.other_class)
        chapter = Chapter.objects.create(name='Motion', subject=subject, order_index=1)
        foreign_quiz = create_quiz(chapter)

        with self.assertRaises(NotFound):
            submit_attempt(self.student, foreign_quiz.pk, {})

    def test_unknown_quiz_is_not_found(self):
        with self.assertRaises(NotFound):
            submit_attempt(self.student, 999999, {})

    def test_missing_answers_is_a_bad_request(self):
        with self.assertRaises(BadRequest):
            submit_attempt(self.student, self.quiz.pk, None)
        with self.assertRaises(BadRequest):
            submit_attempt(self.student, None, {})


class RecordQuizStartTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.quiz = create_quiz(self.chapter)

    def test_first_open_is_kept(self):
        first = timezone.now() - timedelta(minutes=5)
        record_quiz_start(self.student, self.quiz, now=first)
        start = record_quiz_start(self.student, self.quiz)

        self.assertEqual(start.started_at, first)
        self.assertEqual(QuizStart.objects.filter(quiz=self.quiz).count(), 1)
