"""Common Locations - Services.

LocationService   - writes and hierarchy queries over location nodes
LocationSelector  - cached read-only queries used by the API
AddressService    - validated persistence of address aggregates and their attachments
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from django.conf import settings
from django.contrib.contenttypes.models import ContentType
from django.core.cache import cache
from django.db import models, transaction
from django.db.models import Q

from apps.common.core.exceptions import (
    AddressNotFound,
    InvalidParent,
    LocationNotFound,
    UnsupportedLocale,
)
from .models import (
    Address,
    AddressAttachment,
    LocationNode,
    NodeKind,
    Translation,
    child_kinds_of,
    is_supported_locale,
    parent_kind_for,
)
from .selection import AddressData, AddressSelection, build_address_data

logger = logging.getLogger('apps.locations')

# Cache timeout in seconds (24 hours unless configured)
CACHE_TIMEOUT = getattr(settings, 'GEOGRAPHY_CACHE_TIMEOUT', 3600 * 24)

NODE_LIST_KEY = 'locations:nodes:{kind}:{parent}:{active_only}'
NODE_KEY = 'locations:node:{node_id}'

REFERENCE_FK_FIELDS = ('province', 'city', 'district', 'settlement', 'community', 'village')

# child kind -> key of the nested list in seed entries
SEED_CHILD_KEYS = {
    NodeKind.CITY: 'cities',
    NodeKind.DISTRICT: 'districts',
    NodeKind.SUBURB: 'suburbs',
    NodeKind.SETTLEMENT: 'settlements',
    NodeKind.COMMUNITY: 'communities',
    NodeKind.VILLAGE: 'villages',
}


def node_list_cache_key(kind: str, parent_id: Optional[int] = None, active_only: bool = True) -> str:
    return NODE_LIST_KEY.format(kind=kind, parent=parent_id or 'all', active_only=active_only)


def node_cache_key(node_id: int) -> str:
    return NODE_KEY.format(node_id=node_id)


class LocationService:
    """
    Service for managing administrative locations.
    Enforces the parent/kind rules of the hierarchy on every write.
    """

    @staticmethod
    def get_node(node_id: int) -> LocationNode:
        try:
            return LocationNode.objects.select_related('parent').get(pk=node_id)
        except (LocationNode.DoesNotExist, ValueError, TypeError):
            raise LocationNotFound(details={'id': node_id})

    @staticmethod
    @transaction.atomic
    def create(kind: str, parent_id: Optional[int] = None, title: str = '', description: str = '',
               translations: Optional[Mapping[str, str]] = None, sort_order: int = 0) -> LocationNode:
        """
        Create a node under `parent_id`.

        Raises:
            InvalidParent: parent kind does not match what `kind` requires
            LocationNotFound: parent does not exist
        """
        if kind not in NodeKind.values:
            raise InvalidParent(kind=kind, message=f'Unknown location kind: {kind}')

        expected = parent_kind_for(kind)
        parent = None
        if parent_id is not None:
            parent = LocationService.get_node(parent_id)
        if expected is None and parent is not None:
            raise InvalidParent(kind=kind, parent_kind=parent.kind)
        if expected is not None and (parent is None or parent.kind != expected):
            raise InvalidParent(kind=kind, parent_kind=parent.kind if parent else None)

        node = LocationNode.objects.create(
            kind=kind, parent=parent, title=title or '', description=description or '', sort_order=sort_order,
        )
        for locale, translated in (translations or {}).items():
            LocationService.set_translation(node.pk, locale, translated)

        logger.info(f"Created {kind} #{node.pk} under {parent.kind + ' #' + str(parent.pk) if parent else 'root'}")
        return node

    @staticmethod
    def update(node_id: int, **fields) -> LocationNode:
        node = LocationService.get_node(node_id)
        allowed = {'title', 'description', 'is_active', 'sort_order'}
        changed = [name for name in fields if name in allowed]
        for name in changed:
            setattr(node, name, fields[name])
        if changed:
            node.save(update_fields=changed + ['updated_at'])
        return node

    @staticmethod
    def set_translation(node_id: int, locale: str, title: str) -> Translation:
        if not is_supported_locale(locale):
            raise UnsupportedLocale(details={'locale': locale})
        node = LocationService.get_node(node_id)
        translation, _ = Translation.objects.update_or_create(node=node, locale=locale, defaults={'title': title})
        return translation

    @staticmethod
    def get_children(node_id: int, child_kind: Optional[str] = None) -> List[LocationNode]:
        """Ordered children of a node, optionally of one kind only."""
        node = LocationService.get_node(node_id)
        if child_kind is not None and not node.can_have_children(child_kind):
            return []
        qs = node.children.all()
        if child_kind is not None:
            qs = qs.filter(kind=child_kind)
        return list(qs.order_by('sort_order', 'title', 'id'))

    @staticmethod
    def get_ancestor_chain(node: Union[LocationNode, int]) -> List[LocationNode]:
        """Chain root -> node, e.g. Province, District, Settlement, Village."""
        if not isinstance(node, LocationNode):
            node = LocationService.get_node(node)
        return node.ancestors()

    @staticmethod
    def descendant_ids(node: LocationNode) -> List[int]:
        ids = [node.pk]
        frontier = [node.pk]
        while frontier:
            frontier = list(LocationNode.objects.filter(parent_id__in=frontier).values_list('id', flat=True))
            ids.extend(frontier)
        return ids

    @staticmethod
    @transaction.atomic
    def delete(node_id: int) -> int:
        """
        Delete a node and its subtree.

        Addresses referencing any deleted node are kept; the reference is
        cleared (SET NULL / m2m row removal). Returns the number of affected
        addresses.
        """
        node = LocationService.get_node(node_id)
        ids = LocationService.descendant_ids(node)

        query = Q(suburbs__in=ids)
        for name in REFERENCE_FK_FIELDS:
            query |= Q(**{f'{name}__in': ids})
        detached = Address.objects.filter(query).distinct().count()

        node.delete()
        logger.info(f"Deleted {node.kind} #{node_id} with {len(ids) - 1} descendants, detached {detached} addresses")
        return detached

    @staticmethod
    def get_statistics() -> Dict[str, int]:
        """Node counts per kind."""
        counts = dict(
            LocationNode.objects.filter(is_active=True).order_by().values_list('kind').annotate(total=models.Count('id'))
        )
        return {kind: counts.get(kind, 0) for kind in NodeKind.values}

    @staticmethod
    def load_seed(data: Iterable[Mapping[str, Any]], force: bool = False) -> Dict[str, int]:
        """
        Load a nested reference dataset (see seed.GEOGRAPHY).

        Nodes are matched on (kind, parent, title), so loading twice is a no-op.

        Args:
            force: If True, delete existing nodes before import

        Returns:
            Dict with number of created nodes per kind

        Raises:
            UnsupportedLocale: a translation uses a locale other than tj, ru, eng;
                nothing is written
        """
        counts = {kind: 0 for kind in NodeKind.values}

        def load(kind: str, entry: Mapping[str, Any], parent: Optional[LocationNode], order: int):
            translations = entry.get('translations', {})
            title = entry.get('title') or translations.get('ru') or ''
            node, created = LocationNode.objects.update_or_create(
                kind=kind, parent=parent, title=title,
                defaults={'description': entry.get('description', ''), 'sort_order': order},
            )
            for locale, translated in translations.items():
                LocationService.set_translation(node.pk, locale, translated)
            if created:
                counts[kind] += 1
            for child_kind in child_kinds_of(kind):
                for index, child in enumerate(entry.get(SEED_CHILD_KEYS[child_kind], [])):
                    load(child_kind, child, node, index)

        with transaction.atomic():
            if force:
                deleted, _ = LocationNode.objects.all().delete()
                logger.warning(f"Force reload: deleted {deleted} location rows")
            for index, province in enumerate(data):
                load(NodeKind.PROVINCE, province, None, index)

        logger.info(f"Loaded geography: {counts}")
        return counts


class LocationSelector:
    """
    Read-only queries for locations with caching.

    Node lists are cached per kind/parent; titles are resolved separately
    through the locale-scoped TranslationIndex cache.
    """

    @staticmethod
    def list_nodes(kind: str, parent_id: Optional[int] = None, active_only: bool = True) -> List[LocationNode]:
        """All nodes of a kind, optionally under one parent, with caching."""
        cache_key = node_list_cache_key(kind, parent_id, active_only)
        result = cache.get(cache_key)

        if result is None:
            qs = LocationNode.objects.filter(kind=kind)
            if parent_id is not None:
                qs = qs.filter(parent_id=parent_id)
            if active_only:
                qs = qs.filter(is_active=True)
            result = list(qs.order_by('sort_order', 'title', 'id'))
            cache.set(cache_key, result, CACHE_TIMEOUT)

        return result

    @staticmethod
    def get_node(node_id: int, kind: Optional[str] = None) -> LocationNode:
        """Get one node with caching; LocationNotFound if missing or of another kind."""
        cache_key = node_cache_key(node_id)
        result = cache.get(cache_key)

        if result is None:
            try:
                result = LocationNode.objects.get(pk=node_id)
            except (LocationNode.DoesNotExist, ValueError, TypeError):
                raise LocationNotFound(details={'id': node_id})
            cache.set(cache_key, result, CACHE_TIMEOUT)

        if kind is not None and result.kind != kind:
            raise LocationNotFound(details={'id': node_id, 'kind': kind})
        return result

    @staticmethod
    def get_children(node: LocationNode, child_kind: str, active_only: bool = True) -> List[LocationNode]:
        if not node.can_have_children(child_kind):
            return []
        return LocationSelector.list_nodes(child_kind, node.pk, active_only)

    @staticmethod
    def search(query: str, kind: Optional[str] = None, limit: int = 20) -> List[LocationNode]:
        """
        Search nodes by primary title or any translation.
        Case-insensitive substring match; queries shorter than 2 characters return nothing.
        """
        query = (query or '').strip()
        if len(query) < 2:
            return []
        qs = LocationNode.objects.filter(is_active=True).filter(
            Q(title__icontains=query) | Q(translations__title__icontains=query)
        )
        if kind:
            qs = qs.filter(kind=kind)
        return list(qs.distinct().order_by('kind', 'sort_order', 'title', 'id')[:limit])

    @staticmethod
    def invalidate_node(node: LocationNode, previous_parent_id: Optional[int] = None) -> None:
        keys = [node_cache_key(node.pk)]
        for active_only in (True, False):
            keys.append(node_list_cache_key(node.kind, None, active_only))
            for parent_id in {node.parent_id, previous_parent_id} - {None}:
                keys.append(node_list_cache_key(node.kind, parent_id, active_only))
        cache.delete_many(keys)


Selection = Union[AddressSelection, AddressData, Mapping[str, Any]]


class AddressService:
    """
    Address aggregate store.

    Every write validates the complete selection and persists it in one
    transaction; readers never see a half-updated aggregate.
    """

    @staticmethod
    def _as_selection(selection: Selection) -> AddressSelection:
        if isinstance(selection, AddressData):
            return selection.to_selection()
        if isinstance(selection, AddressSelection):
            return selection
        return AddressSelection.from_mapping(selection)

    @staticmethod
    def _write(address: Address, data: AddressData) -> Address:
        address.province_id = data.province_id
        address.city_id = data.city_id
        address.district_id = data.district_id
        address.settlement_id = data.settlement_id
        address.community_id = data.community_id
        address.village_id = data.village_id
        address.line = data.line
        address.save()
        address.suburbs.set(data.suburb_ids)
        return address

    @staticmethod
    def _owner_filter(owner) -> Dict[str, Any]:
        return {
            'content_type': ContentType.objects.get_for_model(owner),
            'object_id': str(owner.pk),
        }

    @staticmethod
    @transaction.atomic
    def create(selection: Selection, owner=None) -> Address:
        data = build_address_data(AddressService._as_selection(selection))
        address = AddressService._write(Address(), data)
        if owner is not None:
            AddressService.attach(address, owner)
        logger.info(f"Created address #{address.pk}")
        return address

    @staticmethod
    def get_address(address_id: int, owner=None) -> Address:
        qs = Address.objects.all()
        if owner is not None:
            qs = qs.filter(attachments__in=AddressAttachment.objects.filter(**AddressService._owner_filter(owner)))
        try:
            return qs.distinct().get(pk=address_id)
        except (Address.DoesNotExist, ValueError, TypeError):
            raise AddressNotFound(details={'id': address_id})

    @staticmethod
    def addresses_for(owner):
        ids = AddressAttachment.objects.filter(**AddressService._owner_filter(owner)).values('address_id')
        return Address.objects.filter(pk__in=ids).prefetch_related('suburbs').order_by('-created_at')

    @staticmethod
    @transaction.atomic
    def replace(address_id: int, selection: Selection, owner=None) -> Address:
        """Whole-object replace: fields missing from `selection` are cleared."""
        AddressService.get_address(address_id, owner)
        address = Address.objects.select_for_update().get(pk=address_id)
        data = build_address_data(AddressService._as_selection(selection))
        AddressService._write(address, data)
        logger.info(f"Replaced address #{address.pk}")
        return address

    @staticmethod
    @transaction.atomic
    def patch(address_id: int, patch: Mapping[str, Any], owner=None) -> Address:
        """Merge `patch` over the stored selection and validate the merged result as a whole."""
        AddressService.get_address(address_id, owner)
        address = Address.objects.select_for_update().get(pk=address_id)
        merged = address.to_data().to_selection().merged(patch)
        data = build_address_data(merged)
        AddressService._write(address, data)
        logger.info(f"Patched address #{address.pk} fields={sorted(patch)}")
        return address

    @staticmethod
    def attach(address: Address, owner) -> AddressAttachment:
        attachment, _ = AddressAttachment.objects.get_or_create(address=address, **AddressService._owner_filter(owner))
        return attachment

    @staticmethod
    @transaction.atomic
    def detach_owner(address_id: int, owner) -> bool:
        """
        Remove the owner's link to an address. The aggregate itself is deleted
        once nothing references it any more. Returns True if it was deleted.
        """
        address = AddressService.get_address(address_id, owner)
        AddressAttachment.objects.filter(address=address, **AddressService._owner_filter(owner)).delete()
        if address.attachments.exists():
            return False
        address.delete()
        logger.info(f"Deleted unreferenced address #{address_id}")
        return True
