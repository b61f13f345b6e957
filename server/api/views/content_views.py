import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from main.analytics.engagement import record_content_view
from main.exceptions import NotFound
from main.models import Chapter, Content

from ..permissions import IsTeacher
from ..serializers.content_serializers import ContentSerializer, ContentViewSerializer, VideoLinkSerializer
from .teacher_views import get_teacher_chapter

logger = logging.getLogger(__name__)


class ChapterContentView(APIView):
    """Content of one chapter, for whoever can see the chapter's subject."""

    def get(self, request, chapter_id):
        chapter = Chapter.objects.visible_to(request.user).filter(pk=chapter_id).first()
        if chapter is None:
            raise NotFound("Chapter not found")
        contents = chapter.contents.select_related('chapter', 'uploaded_by')
        return Response(ContentSerializer(contents, many=True).data)


class VideoLinkView(APIView):
    permission_classes = [IsTeacher]

    def post(self, request):
        serializer = VideoLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        chapter = get_teacher_chapter(request.user, data['chapter_id'])
        content = Content.objects.create(
            chapter=chapter,
            title=data['title'],
            type=Content.TYPES.video,
            file_url=data['video_url'],
            uploaded_by=request.user,
        )
        return Response(
            {
                'success': True,
                'data': ContentSerializer(content).data,
                'message': 'Video link added successfully',
            },
            status=status.HTTP_201_CREATED,
        )


class ContentViewRecordView(APIView):
    def post(self, request):
        serializer = ContentViewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        content = Content.objects.visible_to(request.user).filter(pk=data['content_id']).first()
        if content is None:
            raise NotFound("Content not found")
        view = record_content_view(
            request.user,
            content,
            time_spent=data['time_spent'],
            completion=data.get('completion_percentage'),
        )
        return Response({
            'success': True,
            'data': {
                'contentId': content.pk,
                'viewCount': view.view_count,
                'totalTimeSpent': view.total_time_spent,
                'completionPercentage': view.completion_percentage,
                'lastAccessed': view.last_accessed,
            },
        })
