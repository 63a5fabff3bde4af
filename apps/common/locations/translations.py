"""Common Locations - Translation Index.

Resolves the display title of a location node for a requested locale.
Resolution order, applied to every node kind:

1. translation in the requested locale
2. translation in the default locale
3. the node's own title
4. "<Kind> #<id>"

Resolved titles are cached per (node, locale) and dropped by the signal
handlers whenever a node or one of its translations changes.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.core.cache import cache

from .models import Locale, LocationNode, NodeKind, Translation, default_locale, is_supported_locale

logger = logging.getLogger('apps.locations')

TITLE_CACHE_KEY = 'locations:title:{node_id}:{locale}'


def title_cache_key(node_id: int, locale: str) -> str:
    return TITLE_CACHE_KEY.format(node_id=node_id, locale=locale)


def pick_title(kind: str, node_id, primary_title: Optional[str], translations: Mapping[str, str],
               locale: Optional[str], default: str) -> str:
    """Apply the fallback chain to already-loaded data. Never raises."""
    for candidate in (locale, default):
        if candidate:
            title = (translations.get(candidate) or '').strip()
            if title:
                return title
    if primary_title and primary_title.strip():
        return primary_title.strip()
    return f"{NodeKind(kind).label if kind in NodeKind.values else kind.title()} #{node_id}"


class TranslationIndex:
    """Per-node, per-locale title lookup with deterministic fallback."""

    def __init__(self, default: Optional[str] = None, use_cache: bool = True):
        self.default = default or default_locale()
        self.use_cache = use_cache
        self.timeout = getattr(settings, 'GEOGRAPHY_CACHE_TIMEOUT', 3600 * 24)

    def effective_locale(self, locale: Optional[str]) -> str:
        # An unsupported locale never matches step 1, so it resolves exactly
        # like the default locale.
        return locale if is_supported_locale(locale) else self.default

    def resolve(self, node: LocationNode, locale: Optional[str]) -> str:
        return self.titles([node], locale)[node.pk]

    def titles(self, nodes: Iterable[LocationNode], locale: Optional[str]) -> Dict[int, str]:
        """
        Resolve titles for many nodes with at most one translation query.

        With caching on, titles are computed from the stored rows, not from
        the passed instances.
        Without caching, the instances and their prefetched translations are
        used as they are.
        """
        nodes = [node for node in nodes if node is not None]
        locale = self.effective_locale(locale)
        result: Dict[int, str] = {}

        pending = {node.pk: node for node in nodes}
        if self.use_cache and pending:
            keys = {title_cache_key(pk, locale): pk for pk in pending}
            for key, title in cache.get_many(list(keys)).items():
                result[keys[key]] = title
                pending.pop(keys[key], None)

        if not pending:
            return result

        if self.use_cache:
            stored = {
                pk: (kind, title)
                for pk, kind, title in LocationNode.objects.filter(pk__in=list(pending)).values_list('id', 'kind', 'title')
            }
            loaded = self._query_translations(list(stored), locale)
        else:
            stored = {}
            loaded = self._load_translations(list(pending.values()), locale)

        fresh = {}
        for pk, node in pending.items():
            kind, primary = stored.get(pk, (node.kind, node.title))
            title = pick_title(kind, pk, primary, loaded.get(pk, {}), locale, self.default)
            result[pk] = title
            if pk in stored:
                fresh[title_cache_key(pk, locale)] = title
        if fresh:
            cache.set_many(fresh, self.timeout)

        return result

    def _load_translations(self, nodes: List[LocationNode], locale: str) -> Dict[int, Dict[str, str]]:
        loaded: Dict[int, Dict[str, str]] = {}
        to_query = []
        for node in nodes:
            prefetched = getattr(node, '_prefetched_objects_cache', {}).get('translations')
            if prefetched is not None:
                loaded[node.pk] = {t.locale: t.title for t in prefetched}
            else:
                to_query.append(node.pk)
        loaded.update(self._query_translations(to_query, locale))
        return loaded

    def _query_translations(self, node_ids: List[int], locale: str) -> Dict[int, Dict[str, str]]:
        loaded: Dict[int, Dict[str, str]] = {}
        if node_ids:
            rows = Translation.objects.filter(
                node_id__in=node_ids, locale__in={locale, self.default}
            ).values_list('node_id', 'locale', 'title')
            for node_id, row_locale, title in rows:
                loaded.setdefault(node_id, {})[row_locale] = title
        return loaded

    @staticmethod
    def invalidate(node_ids: Iterable[int]) -> None:
        keys = [title_cache_key(node_id, locale) for node_id in node_ids for locale in Locale.values]
        if keys:
            cache.delete_many(keys)
            logger.debug(f"Dropped {len(keys)} cached titles")
