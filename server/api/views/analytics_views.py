from django.http import HttpResponse
from rest_framework.response import Response
from rest_framework.views import APIView

from main.analytics.aggregator import (
    class_performance,
    class_progress_table,
    dashboard_summary,
    student_progress,
)
from main.analytics.export import progress_csv_filename, progress_table_to_csv
from main.exceptions import NotFound
from main.models import Subject

from ..permissions import IsStudent, IsTeacher
from ..serializers.dashboard_serializers import (
    StudentSubjectProgressSerializer,
    SubjectPerformanceSerializer,
    TeacherDashboardSerializer,
)


class StudentProgressView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        progress = student_progress(request.user)
        return Response({
            'success': True,
            'data': StudentSubjectProgressSerializer(progress, many=True).data,
        })


class ClassPerformanceView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        performance = class_performance(request.user)
        return Response({
            'success': True,
            'data': SubjectPerformanceSerializer(performance, many=True).data,
        })


class DashboardSummaryView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        return Response(TeacherDashboardSerializer(dashboard_summary(request.user)).data)


class StudentProgressTableView(APIView):
    """Progress of every student in one assigned subject; ?export=csv downloads it."""
    permission_classes = [IsTeacher]

    def get(self, request, subject_id):
        subject = Subject.objects.taught_by(request.user).select_related('school_class').filter(pk=subject_id).first()
        if subject is None:
            raise NotFound("Subject not found or not assigned to you")

        rows = class_progress_table(subject)

        if request.query_params.get('export') == 'csv':
            response = HttpResponse(progress_table_to_csv(rows), content_type='text/csv')
            response['Content-Disposition'] = f'attachment; filename="{progress_csv_filename(subject)}"'
            return response

        return Response({
            'success': True,
            'data': {
                'subjectId': subject.pk,
                'subject': subject.name,
                'className': subject.school_class.name,
                'students': rows,
            },
        })
