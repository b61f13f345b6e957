from rest_framework import serializers


class ContentProgressSerializer(serializers.Serializer):
    total = serializers.IntegerField(read_only=True)
    viewed = serializers.IntegerField(read_only=True)
    percentage = serializers.IntegerField(read_only=True)
    avgCompletion = serializers.IntegerField(read_only=True)


class QuizProgressSerializer(serializers.Serializer):
    total = serializers.IntegerField(read_only=True)
    attempted = serializers.IntegerField(read_only=True)
    percentage = serializers.IntegerField(read_only=True)
    avgScore = serializers.IntegerField(read_only=True)


class StudentSubjectProgressSerializer(serializers.Serializer):
    """Serializer for the student's own per-subject progress"""
    subjectId = serializers.IntegerField(read_only=True)
    subject = serializers.CharField(read_only=True)
    contentProgress = ContentProgressSerializer(read_only=True)
    quizProgress = QuizProgressSerializer(read_only=True)


class TopPerformerSerializer(serializers.Serializer):
    studentId = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    rollNumber = serializers.CharField(read_only=True)
    quizId = serializers.IntegerField(read_only=True)
    score = serializers.IntegerField(read_only=True)


class SubjectPerformanceSerializer(serializers.Serializer):
    """Serializer for one subject in the teacher's class-performance view"""
    subjectId = serializers.IntegerField(read_only=True)
    subject = serializers.CharField(read_only=True)
    className = serializers.CharField(read_only=True)
    totalStudents = serializers.IntegerField(read_only=True)
    activeStudents = serializers.IntegerField(read_only=True)
    engagementRate = serializers.IntegerField(read_only=True)
    totalQuizAttempts = serializers.IntegerField(read_only=True)
    avgQuizScore = serializers.IntegerField(read_only=True)
    avgContentViews = serializers.IntegerField(read_only=True)
    avgTimeSpent = serializers.IntegerField(read_only=True)
    topPerformers = TopPerformerSerializer(many=True, read_only=True)


class TeacherDashboardSerializer(serializers.Serializer):
    """Serializer for the teacher dashboard summary cards"""
    totalStudents = serializers.IntegerField(read_only=True)
    activeClasses = serializers.IntegerField(read_only=True)
    avgPerformance = serializers.CharField(read_only=True)
    totalQuizzes = serializers.IntegerField(read_only=True)
    totalContent = serializers.IntegerField(read_only=True)


class QuizStatisticsSerializer(serializers.Serializer):
    quizId = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    totalAttempts = serializers.IntegerField(read_only=True)
    averageScore = serializers.FloatField(read_only=True)
    averagePercentage = serializers.IntegerField(read_only=True)
    passRate = serializers.IntegerField(read_only=True)
