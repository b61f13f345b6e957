from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from main.analytics.export import PROGRESS_COLUMNS
from main.models import ContentView, StudentAttempt, Subject
from main.tests.factories import SchoolFixtureMixin, create_content, create_quiz


class StudentProgressViewTests(SchoolFixtureMixin, APITestCase):
    def setUp(self):
        self.build_school()
        self.client.force_authenticate(self.student)

    def test_progress_per_subject(self):
        content = create_content(self.chapter)
        quiz = create_quiz(self.chapter)
        ContentView.objects.create(content=content, user=self.student, view_count=1, completion_percentage=100)
        StudentAttempt.objects.create(student=self.student, quiz=quiz, score=3, total_marks=3)

        response = self.client.get(reverse('student-progress'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        entry = response.data['data'][0]
        self.assertEqual(entry['subject'], 'Mathematics')
        self.assertEqual(entry['contentProgress']['percentage'], 100)
        self.assertEqual(entry['quizProgress']['avgScore'], 100)


class TeacherAnalyticsViewTests(SchoolFixtureMixin, APITestCase):
    def setUp(self):
        self.build_school()
        self.quiz = create_quiz(self.chapter)
        StudentAttempt.objects.create(student=self.student, quiz=self.quiz, score=2, total_marks=3)
        self.client.force_authenticate(self.teacher)

    def test_progress_table_as_json(self):
        response = self.client.get(reverse('teacher-student-progress', args=[self.subject.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['subject'], 'Mathematics')
        self.assertEqual(data['className'], 'Class 10')
        self.assertEqual(len(data['students']), 1)
        self.assertEqual(data['students'][0]['quizzes_attempted'], 1)

    def test_progress_table_as_csv(self):
        response = self.client.get(
            reverse('teacher-student-progress', args=[self.subject.pk]), {'export': 'csv'},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn('attachment; filename="student-progress-mathematics.csv"', response['Content-Disposition'])
        lines = response.content.decode().splitlines()
        self.assertEqual(lines[0], ','.join(PROGRESS_COLUMNS))
        self.assertTrue(lines[1].startswith('STU001,Sade Student,Class 10,'))

    def test_unassigned_subject_is_not_found(self):
        other = Subject.objects.create(name='History', school_class=self.school_class)

        response = self.client.get(reverse('teacher-student-progress', args=[other.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_dashboard_summary(self):
        response = self.client.get(reverse('teacher-dashboard-summary'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'totalStudents': 1,
            'activeClasses': 1,
            'avgPerformance': '67%',
            'totalQuizzes': 1,
            'totalContent': 0,
        })

    def test_class_performance(self):
        response = self.client.get(reverse('teacher-analytics'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        subject = response.data['data'][0]
        self.assertEqual(subject['engagementRate'], 100)
        self.assertEqual(subject['topPerformers'][0]['rollNumber'], 'STU001')

    def test_student_cannot_read_teacher_analytics(self):
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get(reverse('teacher-analytics')).status_code, status.HTTP_401_UNAUTHORIZED)
