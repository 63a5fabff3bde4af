"""Common Core - Base Models and Mixins."""
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model with automatic created/updated timestamps."""
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Дата создания')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='Дата обновления')

    class Meta:
        abstract = True
        ordering = ['-created_at']


class OrderedMixin(models.Model):
    """Mixin that adds ordering capability."""
    sort_order = models.IntegerField(default=0, db_index=True, verbose_name='Порядок')

    class Meta:
        abstract = True
        ordering = ['sort_order']


class ActiveMixin(models.Model):
    """Simple is_active toggle mixin."""
    is_active = models.BooleanField(default=True, db_index=True, verbose_name='Активен')

    class Meta:
        abstract = True
