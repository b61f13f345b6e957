from django.db import transaction
from rest_framework import serializers

from main.common.utils import lms_setting
from main.models import OPTIONS_PER_QUESTION, Question, Quiz


class QuestionSerializer(serializers.ModelSerializer):
    """Teacher view of a question, answer key included."""

    class Meta:
        model = Question
        fields = ['id', 'question_text', 'options', 'correct_answer', 'marks', 'order_index']


class StudentQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = ['id', 'question_text', 'options', 'marks', 'order_index']


class QuizSerializer(serializers.ModelSerializer):
    chapter_name = serializers.CharField(source='chapter.name', read_only=True)
    subject = serializers.IntegerField(source='chapter.subject_id', read_only=True)

    class Meta:
        model = Quiz
        fields = ['id', 'title', 'type', 'time_limit', 'total_questions', 'chapter', 'chapter_name', 'subject', 'created']


class QuizDetailSerializer(QuizSerializer):
    questions = serializers.SerializerMethodField()

    class Meta(QuizSerializer.Meta):
        fields = QuizSerializer.Meta.fields + ['questions']

    def get_questions(self, obj):
        question_serializer = QuestionSerializer if self.context.get('with_answers') else StudentQuestionSerializer
        return question_serializer(obj.questions.all(), many=True).data


class QuestionInputSerializer(serializers.Serializer):
    question_text = serializers.CharField()
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=False),
        min_length=OPTIONS_PER_QUESTION,
        max_length=OPTIONS_PER_QUESTION,
    )
    correct_answer = serializers.IntegerField(min_value=0, max_value=OPTIONS_PER_QUESTION - 1)
    marks = serializers.IntegerField(min_value=1, default=1)


class QuizCreateSerializer(serializers.Serializer):
    chapter_id = serializers.IntegerField()
    title = serializers.CharField(max_length=200)
    type = serializers.ChoiceField(choices=Quiz.TYPES, default=Quiz.TYPES.chapter)
    time_limit = serializers.IntegerField(min_value=1, required=False)
    questions = QuestionInputSerializer(many=True, allow_empty=False)

    @transaction.atomic
    def create(self, validated_data):
        questions = validated_data.pop('questions')
        quiz = Quiz.objects.create(
            chapter=validated_data['chapter'],
            title=validated_data['title'],
            type=validated_data['type'],
            time_limit=validated_data.get('time_limit') or lms_setting('DEFAULT_TIME_LIMIT'),
            total_questions=len(questions),
            created_by=validated_data['created_by'],
        )
        Question.objects.bulk_create([
            Question(quiz=quiz, order_index=index, **question)
            for index, question in enumerate(questions, start=1)
        ])
        return quiz

    def to_representation(self, instance):
        return QuizSerializer(instance).data


class QuizSubmitSerializer(serializers.Serializer):
    quizId = serializers.IntegerField()
    answers = serializers.DictField()
