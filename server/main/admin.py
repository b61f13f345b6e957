from django.contrib import admin

from .models import (
    Chapter,
    ClassList,
    Content,
    ContentView,
    Question,
    Quiz,
    QuizStart,
    StudentAttempt,
    Subject,
    TeacherAssignment,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('roll_number', 'full_name', 'role', 'school_class', 'is_active')
    list_filter = ('role', 'school_class', 'is_active')
    search_fields = ('roll_number', 'full_name')
    exclude = ('password', 'user_permissions', 'groups')


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'school_class')
    list_filter = ('school_class',)
    search_fields = ('name',)


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ('title', 'chapter', 'type', 'time_limit', 'total_questions', 'created_by')
    list_filter = ('type', 'chapter__subject')
    search_fields = ('title',)
    inlines = [QuestionInline]


@admin.register(StudentAttempt)
class StudentAttemptAdmin(admin.ModelAdmin):
    list_display = ('student', 'quiz', 'score', 'total_marks', 'completed_at')
    list_filter = ('quiz__chapter__subject',)
    search_fields = ('student__roll_number', 'student__full_name', 'quiz__title')


@admin.register(Content)
class ContentAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'chapter', 'uploaded_by', 'created')
    list_filter = ('type',)
    search_fields = ('title',)


admin.site.register(ClassList)
admin.site.register(TeacherAssignment)
admin.site.register(Chapter)
admin.site.register(ContentView)
admin.site.register(QuizStart)
