import django_filters
from django.db.models import Q

from .models import ROLE_CHOICES, User


class UserFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method='filter_by_all', label='Search')
    role = django_filters.ChoiceFilter(choices=ROLE_CHOICES)
    class_name = django_filters.CharFilter(field_name='school_class__name', lookup_expr='iexact')

    class Meta:
        model = User
        fields = ['q', 'role', 'class_name']

    def filter_by_all(self, queryset, name, value):
        return queryset.filter(
            Q(full_name__icontains=value) |
            Q(roll_number__icontains=value)
        )
