"""Common Locations - Administrative Units Models.

Tajik administrative hierarchy stored as one typed node table:
- Province -> City -> Suburb
- Province -> District -> Settlement -> Village
- Province -> District -> Community

Titles are translated per locale (see translations.TranslationIndex) and
addresses reference nodes by id, never by raw text.
"""
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models

from apps.common.core.models import ActiveMixin, OrderedMixin, TimeStampedModel


class NodeKind(models.TextChoices):
    PROVINCE = 'province', 'Province'
    CITY = 'city', 'City'
    DISTRICT = 'district', 'District'
    SUBURB = 'suburb', 'Suburb'
    SETTLEMENT = 'settlement', 'Settlement'
    COMMUNITY = 'community', 'Community'
    VILLAGE = 'village', 'Village'


class Locale(models.TextChoices):
    TAJIK = 'tj', 'Таджикский'
    RUSSIAN = 'ru', 'Русский'
    ENGLISH = 'eng', 'Английский'


ADDRESS_LINE_MAX_LENGTH = 255

# child kind -> required parent kind
PARENT_KINDS: Dict[str, str] = {
    NodeKind.CITY: NodeKind.PROVINCE,
    NodeKind.DISTRICT: NodeKind.PROVINCE,
    NodeKind.SUBURB: NodeKind.CITY,
    NodeKind.SETTLEMENT: NodeKind.DISTRICT,
    NodeKind.COMMUNITY: NodeKind.DISTRICT,
    NodeKind.VILLAGE: NodeKind.SETTLEMENT,
}


def parent_kind_for(kind: str) -> Optional[str]:
    """Kind a node of `kind` must hang under; None for provinces."""
    return PARENT_KINDS.get(kind)


def child_kinds_of(kind: str) -> List[str]:
    return [child for child, parent in PARENT_KINDS.items() if parent == kind]


def default_locale() -> str:
    return getattr(settings, 'GEOGRAPHY_DEFAULT_LOCALE', Locale.TAJIK)


def is_supported_locale(locale: Optional[str]) -> bool:
    return locale in Locale.values


class LocationNode(TimeStampedModel, OrderedMixin, ActiveMixin):
    """One entry of the administrative hierarchy, tagged with its kind."""
    kind = models.CharField(max_length=20, choices=NodeKind.choices, db_index=True, verbose_name='Kind')
    parent = models.ForeignKey(
        'self', on_delete=models.CASCADE, null=True, blank=True,
        related_name='children', verbose_name='Parent',
    )
    title = models.CharField(max_length=255, blank=True, verbose_name='Title')
    description = models.TextField(blank=True, verbose_name='Description')

    class Meta:
        verbose_name = 'Location'
        verbose_name_plural = 'Locations'
        ordering = ['sort_order', 'title', 'id']
        indexes = [
            models.Index(fields=['kind', 'parent'], name='loc_node_kind_parent_idx'),
            models.Index(fields=['parent', 'sort_order'], name='loc_node_parent_order_idx'),
        ]

    def __str__(self) -> str:
        return self.title or self.fallback_title

    @property
    def fallback_title(self) -> str:
        return f"{self.get_kind_display()} #{self.pk}"

    @property
    def expected_parent_kind(self) -> Optional[str]:
        return parent_kind_for(self.kind)

    @property
    def has_translations(self) -> bool:
        return self.translations.exists()

    def can_have_children(self, kind: str) -> bool:
        return parent_kind_for(kind) == self.kind

    def clean(self):
        if self.pk:
            stored_kind = LocationNode.objects.filter(pk=self.pk).values_list('kind', flat=True).first()
            if stored_kind is not None and stored_kind != self.kind:
                raise DjangoValidationError({'kind': 'The kind of an existing location cannot be changed.'})
        expected = self.expected_parent_kind
        if expected is None and self.parent_id:
            raise DjangoValidationError({'parent': f'{self.get_kind_display()} cannot have a parent.'})
        if expected is not None:
            if self.parent is None:
                raise DjangoValidationError({'parent': f'{self.get_kind_display()} requires a parent of kind {expected}.'})
            if self.parent.kind != expected:
                raise DjangoValidationError({'parent': f'{self.get_kind_display()} must belong to a {expected}, not a {self.parent.kind}.'})

    def ancestors(self) -> List['LocationNode']:
        """Ancestor chain root -> self."""
        chain = [self]
        seen = {self.pk}
        current = self.parent
        while current is not None and current.pk not in seen:
            chain.append(current)
            seen.add(current.pk)
            current = current.parent
        chain.reverse()
        return chain


class Translation(TimeStampedModel):
    """Title of a node in one locale."""
    node = models.ForeignKey(LocationNode, on_delete=models.CASCADE, related_name='translations', verbose_name='Location')
    locale = models.CharField(max_length=4, choices=Locale.choices, verbose_name='Locale')
    title = models.CharField(max_length=255, verbose_name='Title')

    class Meta:
        verbose_name = 'Translation'
        verbose_name_plural = 'Translations'
        ordering = ['node', 'locale']
        constraints = [
            models.UniqueConstraint(fields=['node', 'locale'], name='unique_translation_per_locale'),
        ]

    def __str__(self) -> str:
        return f"{self.title} [{self.locale}]"


def _node_fk(kind: str, verbose_name: str) -> models.ForeignKey:
    # Deleting a node clears the reference instead of deleting the address.
    return models.ForeignKey(
        LocationNode, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='+', limit_choices_to={'kind': kind}, verbose_name=verbose_name,
    )


class Address(TimeStampedModel):
    """Validated combination of node references, attachable to users and listings."""
    province = _node_fk(NodeKind.PROVINCE, 'Province')
    city = _node_fk(NodeKind.CITY, 'City')
    suburbs = models.ManyToManyField(
        LocationNode, blank=True, related_name='+',
        limit_choices_to={'kind': NodeKind.SUBURB}, verbose_name='Suburbs',
    )
    district = _node_fk(NodeKind.DISTRICT, 'District')
    settlement = _node_fk(NodeKind.SETTLEMENT, 'Settlement')
    community = _node_fk(NodeKind.COMMUNITY, 'Community')
    village = _node_fk(NodeKind.VILLAGE, 'Village')
    line = models.CharField(max_length=ADDRESS_LINE_MAX_LENGTH, blank=True, verbose_name='Street / building / apartment')

    class Meta:
        verbose_name = 'Address'
        verbose_name_plural = 'Addresses'
        ordering = ['-created_at']

    def __str__(self) -> str:
        from .formatting import AddressFormatter
        return AddressFormatter().full(self)

    @property
    def is_orphaned(self) -> bool:
        """Every node reference has been detached by node deletion."""
        return not any([
            self.province_id, self.city_id, self.district_id,
            self.settlement_id, self.community_id, self.village_id,
        ]) and not self.suburbs.exists()

    def to_data(self):
        """Stored references as an AddressData snapshot."""
        from .selection import AddressData
        return AddressData.from_references(
            province_id=self.province_id,
            city_id=self.city_id,
            suburb_ids=self.suburbs.values_list('id', flat=True),
            district_id=self.district_id,
            settlement_id=self.settlement_id,
            community_id=self.community_id,
            village_id=self.village_id,
            line=self.line,
        )


class AddressAttachment(TimeStampedModel):
    """Link from an address to its owner (user profile, listing, ...)."""
    address = models.ForeignKey(Address, on_delete=models.CASCADE, related_name='attachments', verbose_name='Address')
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, verbose_name='Owner type')
    object_id = models.CharField(max_length=64, verbose_name='Owner ID')
    owner = GenericForeignKey('content_type', 'object_id')

    class Meta:
        verbose_name = 'Address attachment'
        verbose_name_plural = 'Address attachments'
        constraints = [
            models.UniqueConstraint(fields=['address', 'content_type', 'object_id'], name='unique_address_owner'),
        ]
        indexes = [
            models.Index(fields=['content_type', 'object_id'], name='loc_attach_owner_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.content_type.model}#{self.object_id} -> address #{self.address_id}"
