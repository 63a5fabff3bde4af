"""Common Locations - Address Formatter.

Renders an address as display text:

- full:  every populated level in canonical order plus the free-form line,
         e.g. "Согдийская область, Худжанд, Центр"
- short: the first two populated units among city, district, suburb,
         settlement and community (province when none is set),
         e.g. "Худжанд, Центр" or "Рошткала, Хорог"

The same code serves persisted addresses, validated AddressData and the
in-progress selection shown as a live preview, so storing an address never
changes how it reads.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .models import Address, LocationNode
from .selection import AddressData, AddressSelection, normalize_line, to_node_id
from .translations import TranslationIndex

# locale -> (persisted placeholder, unsaved placeholder)
PLACEHOLDERS: Dict[str, Tuple[str, str]] = {
    'tj': ('Суроға #{id}', 'Суроға нишон дода нашудааст'),
    'ru': ('Адрес #{id}', 'Адрес не указан'),
    'eng': ('Address #{id}', 'Address not specified'),
}

SEPARATOR = ', '

Formattable = Union[Address, AddressData, AddressSelection, Mapping[str, Any]]


def _dedupe_adjacent(tokens: List[str]) -> List[str]:
    result: List[str] = []
    for token in tokens:
        if result and result[-1].casefold() == token.casefold():
            continue
        result.append(token)
    return result


class AddressFormatter:
    """Locale-aware full and short rendering of addresses."""

    def __init__(self, locale: Optional[str] = None, index: Optional[TranslationIndex] = None):
        self.index = index or TranslationIndex()
        self.locale = self.index.effective_locale(locale)

    def full(self, address: Formattable) -> str:
        return self.render(address)['full']

    def short(self, address: Formattable) -> str:
        return self.render(address)['short']

    def render(self, address: Formattable) -> Dict[str, str]:
        data, address_id = self._normalize(address)
        titles = self._titles(data)

        def title(node_id: Optional[int]) -> Optional[str]:
            return titles.get(node_id) if node_id is not None else None

        full_tokens = [
            title(data.province_id),
            title(data.city_id),
            title(data.district_id),
            *[title(suburb_id) for suburb_id in data.suburb_ids],
            title(data.settlement_id),
            title(data.community_id),
            title(data.village_id),
            data.line or None,
        ]
        full_tokens = _dedupe_adjacent([token for token in full_tokens if token])

        first_suburb = data.suburb_ids[0] if data.suburb_ids else None
        units = [title(data.city_id), title(data.district_id), title(first_suburb),
                 title(data.settlement_id), title(data.community_id)]
        short_tokens = _dedupe_adjacent([unit for unit in units if unit])[:2]
        if not short_tokens and title(data.province_id):
            short_tokens = [title(data.province_id)]

        placeholder = self.placeholder(address_id)
        return {
            'full': SEPARATOR.join(full_tokens) or placeholder,
            'short': SEPARATOR.join(short_tokens) or placeholder,
        }

    def placeholder(self, address_id: Optional[int] = None) -> str:
        persisted, unsaved = PLACEHOLDERS.get(self.locale, PLACEHOLDERS['eng'])
        return persisted.format(id=address_id) if address_id else unsaved

    def _normalize(self, address: Formattable) -> Tuple[AddressData, Optional[int]]:
        if isinstance(address, Address):
            return address.to_data(), address.pk
        if isinstance(address, AddressData):
            return address, None
        if not isinstance(address, AddressSelection):
            address = AddressSelection.from_mapping(address)
        # In-progress selections are rendered as far as they resolve.
        return AddressData.from_references(
            province_id=to_node_id(address.province),
            city_id=to_node_id(address.city),
            suburb_ids=[sid for sid in (to_node_id(s) for s in address.suburbs) if sid],
            district_id=to_node_id(address.district),
            settlement_id=to_node_id(address.settlement),
            community_id=to_node_id(address.community),
            village_id=to_node_id(address.village),
            line=normalize_line(address.line),
        ), None

    def _titles(self, data: AddressData) -> Dict[int, str]:
        node_ids = data.node_ids()
        if not node_ids:
            return {}
        nodes = LocationNode.objects.filter(pk__in=node_ids).only('id', 'kind', 'title')
        return self.index.titles(nodes, self.locale)
