from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from main.analytics.aggregator import (
    SubjectCatalog,
    class_performance,
    class_progress_table,
    dashboard_summary,
    student_progress,
)
from main.exceptions import InternalError
from main.models import STUDENT, TEACHER, Content, ContentView, StudentAttempt
from main.tests.factories import SchoolFixtureMixin, create_content, create_quiz, create_test_user


def attempt(student, quiz, score, total=None):
    return StudentAttempt.objects.create(
        student=student, quiz=quiz, score=score, total_marks=quiz.get_max_score() if total is None else total,
    )


class StudentProgressTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()

    def test_subject_without_material_reports_zero(self):
        progress = student_progress(self.student)

        self.assertEqual(len(progress), 1)
        entry = progress[0]
        self.assertEqual(entry['subjectId'], self.subject.pk)
        self.assertEqual(entry['subject'], 'Mathematics')
        self.assertEqual(entry['contentProgress'], {'total': 0, 'viewed': 0, 'percentage': 0, 'avgCompletion': 0})
        self.assertEqual(entry['quizProgress'], {'total': 0, 'attempted': 0, 'percentage': 0, 'avgScore': 0})

    def test_student_without_class_has_no_subjects(self):
        orphan = create_test_user(STUDENT, roll_number='STU404')
        self.assertEqual(student_progress(orphan), [])

    def test_counts_views_and_attempts(self):
        notes = create_content(self.chapter, title='Notes')
        create_content(self.chapter, title='Slides', type=Content.TYPES.ppt)
        quiz = create_quiz(self.chapter)
        create_quiz(self.chapter, title='Second')
        ContentView.objects.create(content=notes, user=self.student, view_count=2, completion_percentage=80)
        attempt(self.student, quiz, 2)

        entry = student_progress(self.student)[0]

        self.assertEqual(entry['contentProgress'], {'total': 2, 'viewed': 1, 'percentage': 50, 'avgCompletion': 80})
        self.assertEqual(entry['quizProgress'], {'total': 2, 'attempted': 1, 'percentage': 50, 'avgScore': 67})

    def test_quiz_marker_content_is_not_counted(self):
        create_content(self.chapter, title='Quiz link', type=Content.TYPES.quiz)
        create_content(self.chapter, title='Notes')

        entry = student_progress(self.student)[0]

        self.assertEqual(entry['contentProgress']['total'], 1)

    def test_store_failure_surfaces_as_internal_error(self):
        with mock.patch.object(SubjectCatalog, 'resolve', side_effect=DatabaseError('down')):
            with self.assertLogs('main.analytics.aggregator', level='ERROR'):
                with self.assertRaises(InternalError):
                    student_progress(self.student)


class ClassProgressTableTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()

    def test_overall_progress_rounds_half_up(self):
        notes = create_content(self.chapter, title='Notes')
        create_content(self.chapter, title='Worksheet', type=Content.TYPES.note)
        quizzes = [create_quiz(self.chapter, title=f'Quiz {n}') for n in range(4)]
        ContentView.objects.create(content=notes, user=self.student, view_count=1)
        attempt(self.student, quizzes[0], 3)

        rows = class_progress_table(self.subject)

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row['roll_number'], 'STU001')
        self.assertEqual(row['class'], 'Class 10')
        self.assertEqual(row['content_progress'], 50)
        self.assertEqual(row['quiz_progress'], 25)
        self.assertEqual(row['avg_quiz_score'], 100)
        self.assertEqual(row['overall_progress'], 38)

    def test_rows_follow_roll_number_order(self):
        create_test_user(STUDENT, roll_number='STU000', school_class=self.school_class)
        create_test_user(STUDENT, roll_number='STU002', school_class=self.school_class)
        create_test_user(STUDENT, roll_number='X-OTHER', school_class=self.other_class)

        rolls = [row['roll_number'] for row in class_progress_table(self.subject)]

        self.assertEqual(rolls, ['STU000', 'STU001', 'STU002'])


class ClassPerformanceTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()
        self.second = create_test_user(STUDENT, roll_number='STU002', full_name='Second', school_class=self.school_class)
        self.third = create_test_user(STUDENT, roll_number='STU003', full_name='Third', school_class=self.school_class)
        self.quiz = create_quiz(self.chapter)

    def test_engagement_counts_students_with_an_attempt(self):
        attempt(self.student, self.quiz, 2)

        metrics = class_performance(self.teacher)[0]

        self.assertEqual(metrics['subjectId'], self.subject.pk)
        self.assertEqual(metrics['className'], 'Class 10')
        self.assertEqual(metrics['totalStudents'], 3)
        self.assertEqual(metrics['activeStudents'], 1)
        self.assertEqual(metrics['engagementRate'], 33)
        self.assertEqual(metrics['totalQuizAttempts'], 1)
        self.assertEqual(metrics['avgQuizScore'], 67)

    def test_top_performers_rank_by_ratio_then_student(self):
        attempt(self.third, self.quiz, 2)
        attempt(self.student, self.quiz, 2)
        attempt(self.second, self.quiz, 3)

        top = class_performance(self.teacher)[0]['topPerformers']

        self.assertEqual([p['studentId'] for p in top], [self.second.pk, self.student.pk, self.third.pk])
        self.assertEqual(top[0]['score'], 100)
        self.assertEqual(top[1], {
            'studentId': self.student.pk,
            'name': 'Sade Student',
            'rollNumber': 'STU001',
            'quizId': self.quiz.pk,
            'score': 67,
        })

    def test_top_performers_respect_limit(self):
        for student in (self.student, self.second, self.third):
            attempt(student, self.quiz, 1)

        top = class_performance(self.teacher, top_n=2)[0]['topPerformers']

        self.assertEqual(len(top), 2)

    def test_average_time_spent_is_whole_minutes(self):
        notes = create_content(self.chapter)
        ContentView.objects.create(content=notes, user=self.student, view_count=3, total_time_spent=150)
        ContentView.objects.create(content=notes, user=self.second, view_count=1, total_time_spent=90)

        metrics = class_performance(self.teacher)[0]

        self.assertEqual(metrics['avgContentViews'], 2)
        self.assertEqual(metrics['avgTimeSpent'], 2)

    def test_teacher_without_assignments_has_no_rows(self):
        idle = create_test_user(TEACHER, roll_number='TCH404')
        self.assertEqual(class_performance(idle), [])


class DashboardSummaryTests(SchoolFixtureMixin, TestCase):
    def setUp(self):
        self.build_school()

    def test_no_attempts_reports_not_available(self):
        summary = dashboard_summary(self.teacher)

        self.assertEqual(summary['totalStudents'], 1)
        self.assertEqual(summary['activeClasses'], 1)
        self.assertEqual(summary['avgPerformance'], 'N/A')
        self.assertEqual(summary['totalQuizzes'], 0)
        self.assertEqual(summary['totalContent'], 0)

    def test_average_performance_is_formatted_percentage(self):
        quiz = create_quiz(self.chapter)
        create_content(self.chapter)
        attempt(self.student, quiz, 2)

        summary = dashboard_summary(self.teacher)

        self.assertEqual(summary['avgPerformance'], '67%')
        self.assertEqual(summary['totalQuizzes'], 1)
        self.assertEqual(summary['totalContent'], 1)
