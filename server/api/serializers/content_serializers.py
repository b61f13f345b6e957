import re

from rest_framework import serializers

from main.models import Chapter, Content

VIDEO_URL_PATTERN = re.compile(
    r'^https?://(www\.)?(youtube\.com/(watch\?v=|embed/)|youtu\.be/|vimeo\.com/(video/)?\d+)',
    re.IGNORECASE,
)


class ChapterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Chapter
        fields = ['id', 'name', 'subject', 'order_index']
        read_only_fields = ['id', 'subject', 'order_index']


class ContentSerializer(serializers.ModelSerializer):
    url = serializers.CharField(read_only=True)
    chapter_name = serializers.CharField(source='chapter.name', read_only=True)
    uploaded_by = serializers.CharField(source='uploaded_by.full_name', read_only=True, default=None)

    class Meta:
        model = Content
        fields = ['id', 'title', 'type', 'chapter', 'chapter_name', 'url', 'uploaded_by', 'created']


class MaterialUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    title = serializers.CharField(max_length=200)
    chapter_id = serializers.IntegerField()
    type = serializers.ChoiceField(
        choices=[Content.TYPES.pdf, Content.TYPES.ppt, Content.TYPES.note],
        default=Content.TYPES.pdf,
    )


class VideoLinkSerializer(serializers.Serializer):
    chapter_id = serializers.IntegerField()
    title = serializers.CharField(max_length=200)
    video_url = serializers.URLField(max_length=500)

    def validate_video_url(self, value):
        if not VIDEO_URL_PATTERN.match(value):
            raise serializers.ValidationError("Only YouTube and Vimeo links are supported")
        return value


class ContentViewSerializer(serializers.Serializer):
    content_id = serializers.IntegerField()
    time_spent = serializers.IntegerField(min_value=0, default=0)
    completion_percentage = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
