"""Common Locations - Signal Handlers."""
import logging
from django.db.models.signals import post_save, post_delete, pre_save
from django.dispatch import receiver

from .models import LocationNode, Translation
from .services import LocationSelector
from .translations import TranslationIndex

logger = logging.getLogger('apps.locations.signals')


@receiver(pre_save, sender=LocationNode)
def remember_previous_parent(sender, instance, **kwargs):
    """Keep the stored parent so the old parent's child list can be dropped too."""
    instance._previous_parent_id = None
    if instance.pk:
        instance._previous_parent_id = (
            LocationNode.objects.filter(pk=instance.pk).values_list('parent_id', flat=True).first()
        )


@receiver(post_save, sender=LocationNode)
@receiver(post_delete, sender=LocationNode)
def on_node_changed(sender, instance, **kwargs):
    """Invalidate node lists and resolved titles on save/delete."""
    try:
        LocationSelector.invalidate_node(instance, getattr(instance, '_previous_parent_id', None))
        TranslationIndex.invalidate([instance.pk])
    except Exception as e:
        logger.warning(f"Error invalidating location cache for #{instance.pk}: {e}")


@receiver(post_save, sender=Translation)
@receiver(post_delete, sender=Translation)
def on_translation_changed(sender, instance, **kwargs):
    """Invalidate resolved titles of the translated node."""
    try:
        TranslationIndex.invalidate([instance.node_id])
    except Exception as e:
        logger.warning(f"Error invalidating title cache for #{instance.node_id}: {e}")
