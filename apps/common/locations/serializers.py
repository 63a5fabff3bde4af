"""Common Locations - Serializers.

Titles are resolved through the TranslationIndex for the locale found in the
serializer context (`locale`, `index`, optionally precomputed `titles`).
"""
from rest_framework import serializers

from apps.common.core.api import TimestampsMixin
from .formatting import AddressFormatter
from .models import ADDRESS_LINE_MAX_LENGTH, Address, LocationNode, NodeKind
from .selection import FIELD_ALIASES, MAX_NODE_ID, unwrap_reference
from .services import LocationSelector
from .translations import TranslationIndex


def _context_index(context) -> TranslationIndex:
    index = context.get('index')
    if index is None:
        index = context['index'] = TranslationIndex()
    return index


class LocationNodeSerializer(serializers.ModelSerializer):
    """Node with its title resolved for the requested locale."""
    title = serializers.SerializerMethodField()
    parent = serializers.IntegerField(source='parent_id', read_only=True)

    class Meta:
        model = LocationNode
        fields = ['id', 'kind', 'title', 'description', 'parent', 'sort_order']

    def get_title(self, obj) -> str:
        titles = self.context.get('titles') or {}
        if obj.pk in titles:
            return titles[obj.pk]
        return _context_index(self.context).resolve(obj, self.context.get('locale'))


class LocationNodeMinimalSerializer(LocationNodeSerializer):
    """Minimal node (for nested use)."""

    class Meta(LocationNodeSerializer.Meta):
        fields = ['id', 'title']


class _ChildrenMixin:
    def _children(self, obj, kind, serializer_class=LocationNodeSerializer):
        children = LocationSelector.get_children(obj, kind)
        return serializer_class(children, many=True, context=self.context).data


class CitySerializer(_ChildrenMixin, LocationNodeSerializer):
    """City with its suburbs embedded."""
    suburbs = serializers.SerializerMethodField()

    class Meta(LocationNodeSerializer.Meta):
        fields = LocationNodeSerializer.Meta.fields + ['suburbs']

    def get_suburbs(self, obj) -> list:
        return self._children(obj, NodeKind.SUBURB)


class SettlementSerializer(_ChildrenMixin, LocationNodeSerializer):
    """Settlement with its villages embedded."""
    villages = serializers.SerializerMethodField()

    class Meta(LocationNodeSerializer.Meta):
        fields = LocationNodeSerializer.Meta.fields + ['villages']

    def get_villages(self, obj) -> list:
        return self._children(obj, NodeKind.VILLAGE)


class DistrictSerializer(_ChildrenMixin, LocationNodeSerializer):
    """District with settlements (and their villages) and communities embedded."""
    settlements = serializers.SerializerMethodField()
    communities = serializers.SerializerMethodField()

    class Meta(LocationNodeSerializer.Meta):
        fields = LocationNodeSerializer.Meta.fields + ['settlements', 'communities']

    def get_settlements(self, obj) -> list:
        return self._children(obj, NodeKind.SETTLEMENT, SettlementSerializer)

    def get_communities(self, obj) -> list:
        return self._children(obj, NodeKind.COMMUNITY)


class ProvinceSerializer(_ChildrenMixin, LocationNodeSerializer):
    """Province with its cities and districts embedded, one level deep."""
    cities = serializers.SerializerMethodField()
    districts = serializers.SerializerMethodField()

    class Meta(LocationNodeSerializer.Meta):
        fields = LocationNodeSerializer.Meta.fields + ['cities', 'districts']

    def get_cities(self, obj) -> list:
        return self._children(obj, NodeKind.CITY)

    def get_districts(self, obj) -> list:
        return self._children(obj, NodeKind.DISTRICT)


class NodeCreateSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=NodeKind.choices)
    parent = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    sort_order = serializers.IntegerField(required=False, default=0)
    translations = serializers.DictField(child=serializers.CharField(max_length=255), required=False)


class AddressSerializer(TimestampsMixin, serializers.ModelSerializer):
    """
    Address as embedded by collaborators (user profiles, listings):
    every populated field as {id, title}, suburbs as a list, plus display text.
    """
    province = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    city = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    suburbs = LocationNodeMinimalSerializer(many=True, read_only=True)
    district = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    settlement = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    community = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    village = LocationNodeMinimalSerializer(read_only=True, allow_null=True)
    full = serializers.CharField(read_only=True)
    short = serializers.CharField(read_only=True)

    class Meta:
        model = Address
        fields = ['id', 'province', 'city', 'suburbs', 'district', 'settlement',
                  'community', 'village', 'line', 'full', 'short', 'created_at', 'updated_at']

    def to_representation(self, instance):
        locale = self.context.get('locale')
        index = _context_index(self.context)
        data = instance.to_data()
        titles = index.titles(LocationNode.objects.filter(pk__in=data.node_ids()), locale)

        def ref(node_id):
            if node_id is None or node_id not in titles:
                return None
            return {'id': node_id, 'title': titles[node_id]}

        rendered = AddressFormatter(locale, index).render(instance)
        return {
            'id': instance.pk,
            'province': ref(data.province_id),
            'city': ref(data.city_id),
            'suburbs': [ref(suburb_id) for suburb_id in data.suburb_ids if suburb_id in titles],
            'district': ref(data.district_id),
            'settlement': ref(data.settlement_id),
            'community': ref(data.community_id),
            'village': ref(data.village_id),
            'line': instance.line,
            'full': rendered['full'],
            'short': rendered['short'],
            'created_at': self.fields['created_at'].to_representation(instance.created_at),
            'updated_at': self.fields['updated_at'].to_representation(instance.updated_at),
        }


class AddressInputSerializer(serializers.Serializer):
    """
    Serializer for address input.
    Only types are checked here; hierarchy rules run in AddressService, which
    raises InvalidAddress with field-level violations.
    """
    province = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    city = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    suburbs = serializers.ListField(child=serializers.IntegerField(max_value=MAX_NODE_ID), required=False, allow_null=True)
    district = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    settlement = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    community = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    village = serializers.IntegerField(max_value=MAX_NODE_ID, required=False, allow_null=True)
    line = serializers.CharField(max_length=ADDRESS_LINE_MAX_LENGTH, required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        # Accept camelCase / *_id spellings and nested {"id": .., "title": ..} objects.
        normalized = {}
        if hasattr(data, 'keys'):
            for name, aliases in FIELD_ALIASES.items():
                for alias in aliases:
                    if alias in data:
                        value = data.getlist(alias) if name == 'suburbs' and hasattr(data, 'getlist') else data[alias]
                        if name == 'suburbs' and isinstance(value, (list, tuple)):
                            value = [unwrap_reference(v) for v in value]
                        elif name != 'line':
                            value = unwrap_reference(value)
                        normalized[name] = value
                        break
        else:
            normalized = data
        return super().to_internal_value(normalized)


class ValidationResultSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    violations = serializers.ListField(child=serializers.DictField())


class AddressPreviewSerializer(serializers.Serializer):
    full = serializers.CharField()
    short = serializers.CharField()
