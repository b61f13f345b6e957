import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from main.models import Question, Quiz, User

audit_logger = logging.getLogger('audit')


def _sync_question_count(quiz_id):
    Quiz.objects.filter(pk=quiz_id).update(
        total_questions=Question.objects.filter(quiz_id=quiz_id).count()
    )


@receiver(post_save, sender=Question)
def _question_saved(sender, instance, created, **kwargs):
    if created:
        _sync_question_count(instance.quiz_id)


@receiver(post_delete, sender=Question)
def _question_deleted(sender, instance, **kwargs):
    _sync_question_count(instance.quiz_id)


@receiver(post_save, sender=User)
def _user_created(sender, instance, created, **kwargs):
    if created:
        audit_logger.info(
            "User %s created with role %s", instance.roll_number, instance.role,
        )
