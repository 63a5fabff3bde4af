"""Common Locations - Address Selector.

Cascading picker state used by address forms. Changing a level clears every
deeper level, and picking the currently selected value deselects it:

    EMPTY -> PROVINCE_CHOSEN -> CITY_CHOSEN | DISTRICT_CHOSEN -> LEAF_CHOSEN

The selector only tracks ids; whether the result may be stored is decided by
the validator (see `is_accepting`).
"""
from enum import Enum
from typing import Dict, List, Optional

from apps.common.core.exceptions import InvalidStateTransition
from .formatting import AddressFormatter
from .selection import AddressSelection, NodeResolver, validate_selection


class SelectorState(str, Enum):
    EMPTY = 'EMPTY'
    PROVINCE_CHOSEN = 'PROVINCE_CHOSEN'
    CITY_CHOSEN = 'CITY_CHOSEN'
    DISTRICT_CHOSEN = 'DISTRICT_CHOSEN'
    LEAF_CHOSEN = 'LEAF_CHOSEN'


class AddressSelector:
    def __init__(self, allow_multiple_suburbs: bool = True):
        self.allow_multiple_suburbs = allow_multiple_suburbs
        self.province: Optional[int] = None
        self.city: Optional[int] = None
        self.suburbs: List[int] = []
        self.district: Optional[int] = None
        self.settlement: Optional[int] = None
        self.community: Optional[int] = None
        self.village: Optional[int] = None
        self.line: str = ''

    @classmethod
    def from_selection(cls, selection: AddressSelection) -> 'AddressSelector':
        """Restore picker state for an existing address (edit forms)."""
        selector = cls()
        selector.province = selection.province or None
        selector.city = selection.city or None
        selector.suburbs = [s for s in selection.suburbs if s]
        selector.district = selection.district or None
        selector.settlement = selection.settlement or None
        selector.community = selection.community or None
        selector.village = selection.village or None
        selector.line = selection.line or ''
        return selector

    @property
    def state(self) -> SelectorState:
        if self.province is None:
            return SelectorState.EMPTY
        if self.suburbs or self.settlement or self.community or self.village:
            return SelectorState.LEAF_CHOSEN
        if self.city is not None:
            return SelectorState.CITY_CHOSEN
        if self.district is not None:
            return SelectorState.DISTRICT_CHOSEN
        return SelectorState.PROVINCE_CHOSEN

    def _require(self, present, target: SelectorState) -> None:
        if present is None:
            raise InvalidStateTransition(from_state=self.state.value, to_state=target.value)

    def _clear_city_branch(self) -> None:
        self.city = None
        self.suburbs = []

    def _clear_district_branch(self) -> None:
        self.district = None
        self._clear_leaf()

    def _clear_leaf(self) -> None:
        self.settlement = None
        self.community = None
        self.village = None

    def select_province(self, province_id: int) -> SelectorState:
        selected = None if province_id == self.province else province_id
        self.reset()
        self.province = selected
        return self.state

    def select_city(self, city_id: int) -> SelectorState:
        self._require(self.province, SelectorState.CITY_CHOSEN)
        selected = None if city_id == self.city else city_id
        self._clear_city_branch()
        self._clear_district_branch()
        self.city = selected
        return self.state

    def toggle_suburb(self, suburb_id: int) -> SelectorState:
        self._require(self.city, SelectorState.LEAF_CHOSEN)
        if suburb_id in self.suburbs:
            self.suburbs.remove(suburb_id)
        elif self.allow_multiple_suburbs:
            self.suburbs.append(suburb_id)
        else:
            self.suburbs = [suburb_id]
        return self.state

    def select_district(self, district_id: int) -> SelectorState:
        self._require(self.province, SelectorState.DISTRICT_CHOSEN)
        selected = None if district_id == self.district else district_id
        self._clear_city_branch()
        self._clear_district_branch()
        self.district = selected
        return self.state

    def select_settlement(self, settlement_id: int) -> SelectorState:
        self._require(self.district, SelectorState.LEAF_CHOSEN)
        selected = None if settlement_id == self.settlement else settlement_id
        self._clear_leaf()
        self.settlement = selected
        return self.state

    def select_community(self, community_id: int) -> SelectorState:
        self._require(self.district, SelectorState.LEAF_CHOSEN)
        selected = None if community_id == self.community else community_id
        self._clear_leaf()
        self.community = selected
        return self.state

    def select_village(self, village_id: int) -> SelectorState:
        self._require(self.settlement, SelectorState.LEAF_CHOSEN)
        self.village = None if village_id == self.village else village_id
        return self.state

    def set_line(self, line: str) -> None:
        self.line = line or ''

    def reset(self) -> None:
        self.province = None
        self._clear_city_branch()
        self._clear_district_branch()
        self.line = ''

    def to_selection(self) -> AddressSelection:
        return AddressSelection(
            province=self.province, city=self.city, suburbs=tuple(self.suburbs),
            district=self.district, settlement=self.settlement,
            community=self.community, village=self.village, line=self.line,
        )

    def is_accepting(self, resolver: Optional[NodeResolver] = None) -> bool:
        return validate_selection(self.to_selection(), resolver).is_valid

    def preview(self, locale: Optional[str] = None) -> Dict[str, str]:
        """Live full/short text of the current picks."""
        return AddressFormatter(locale).render(self.to_selection())
