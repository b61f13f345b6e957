from django.urls import path, include

from rest_framework_nested import routers
from rest_framework_simplejwt.views import token_refresh

from api.views import (
    admin_views,
    analytics_views,
    auth_views,
    content_views,
    quiz_views,
    student_views,
    teacher_views,
)


router = routers.DefaultRouter()
router.register('admin/users', admin_views.UserViewSet, basename='admin-users')
router.register('admin/classes', admin_views.ClassListViewSet, basename='admin-classes')
router.register('admin/subjects', admin_views.SubjectViewSet, basename='admin-subjects')
router.register('teacher/subjects', teacher_views.TeacherSubjectViewSet, basename='teacher-subjects')
router.register('student/subjects', student_views.StudentSubjectViewSet, basename='student-subjects')

# Nested routers for chapters under a subject
teacher_subjects_router = routers.NestedSimpleRouter(router, 'teacher/subjects', lookup='subject')
teacher_subjects_router.register(
    'chapters', teacher_views.TeacherChapterViewSet, basename='teacher-subject-chapters')

student_subjects_router = routers.NestedSimpleRouter(router, 'student/subjects', lookup='subject')
student_subjects_router.register(
    'chapters', student_views.StudentChapterViewSet, basename='student-subject-chapters')

urlpatterns = [
    # Authentication
    path("auth/login/", auth_views.LoginView.as_view(), name="login"),
    path("auth/logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("auth/token/refresh/", token_refresh, name="token_refresh"),
    path("auth/", include("djoser.urls")),

    # Admin directory
    path('admin/teachers/', admin_views.TeacherListView.as_view(), name='admin-teachers'),
    path('admin/students/<str:class_name>/', admin_views.ClassStudentsView.as_view(), name='admin-class-students'),
    path('admin/assign-subject/', admin_views.AssignSubjectView.as_view(), name='admin-assign-subject'),

    # Teacher
    path('teacher/upload-material/', teacher_views.UploadMaterialView.as_view(), name='teacher-upload-material'),
    path('teacher/analytics/', analytics_views.ClassPerformanceView.as_view(), name='teacher-analytics'),
    path('teacher/dashboard-summary/', analytics_views.DashboardSummaryView.as_view(),
         name='teacher-dashboard-summary'),
    path('teacher/student-progress/<int:subject_id>/', analytics_views.StudentProgressTableView.as_view(),
         name='teacher-student-progress'),

    # Content
    path('content/chapter/<int:chapter_id>/', content_views.ChapterContentView.as_view(), name='chapter-content'),
    path('content/video-link/', content_views.VideoLinkView.as_view(), name='content-video-link'),
    path('content/view/', content_views.ContentViewRecordView.as_view(), name='content-view'),

    # Quizzes
    path('quiz/create/', teacher_views.QuizCreateView.as_view(), name='quiz-create'),
    path('quiz/submit/', quiz_views.QuizSubmitView.as_view(), name='quiz-submit'),
    path('quiz/<int:quiz_id>/', quiz_views.QuizDetailView.as_view(), name='quiz-detail'),
    path('quiz/<int:quiz_id>/stats/', quiz_views.QuizStatsView.as_view(), name='quiz-stats'),

    # Student
    path('student/progress/', analytics_views.StudentProgressView.as_view(), name='student-progress'),

    # Main API routes
    path('', include(router.urls)),
    path('', include(teacher_subjects_router.urls)),
    path('', include(student_subjects_router.urls)),
]
