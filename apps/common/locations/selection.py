"""Common Locations - Address Selection Validator/Builder.

Every address write goes through `build_address_data`. It turns a raw
selection (ids coming from the UI picker or an API payload) into an immutable
`AddressData`, or rejects it with field-level violations. Nothing here writes
to the database; node lookups go through a resolver so the rules can also be
exercised against in-memory nodes.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from apps.common.core.exceptions import InvalidAddress
from .models import ADDRESS_LINE_MAX_LENGTH, LocationNode, NodeKind

logger = logging.getLogger('apps.locations')

# field name -> (node kind, field holding the expected parent)
REFERENCE_FIELDS: Dict[str, Tuple[str, Optional[str]]] = {
    'province': (NodeKind.PROVINCE, None),
    'city': (NodeKind.CITY, 'province'),
    'suburbs': (NodeKind.SUBURB, 'city'),
    'district': (NodeKind.DISTRICT, 'province'),
    'settlement': (NodeKind.SETTLEMENT, 'district'),
    'community': (NodeKind.COMMUNITY, 'district'),
    'village': (NodeKind.VILLAGE, 'settlement'),
}

# Largest id a BigAutoField can hold.
MAX_NODE_ID = 2 ** 63 - 1

SELECTION_FIELDS = ('province', 'city', 'suburbs', 'district', 'settlement', 'community', 'village', 'line')

# Accepted spellings of each field in incoming payloads.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'province': ('province', 'province_id', 'provinceId'),
    'city': ('city', 'city_id', 'cityId'),
    'suburbs': ('suburbs', 'suburb_ids', 'suburbIds'),
    'district': ('district', 'district_id', 'districtId'),
    'settlement': ('settlement', 'settlement_id', 'settlementId'),
    'community': ('community', 'community_id', 'communityId'),
    'village': ('village', 'village_id', 'villageId'),
    'line': ('line', 'street', 'street_address'),
}


class ViolationKind(str, Enum):
    MISSING_REQUIRED_FIELD = 'MISSING_REQUIRED_FIELD'
    BRANCH_CONFLICT = 'BRANCH_CONFLICT'
    DEPENDENCY_VIOLATION = 'DEPENDENCY_VIOLATION'
    INVALID_REFERENCE = 'INVALID_REFERENCE'
    LINE_TOO_LONG = 'LINE_TOO_LONG'


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'kind': self.kind.value, 'field': self.field, 'message': self.message}


def _is_blank(value: Any) -> bool:
    return value is None or value == '' or value == 0 or value is False


def normalize_line(line: Optional[str]) -> str:
    return ' '.join((line or '').split())


def unwrap_reference(value: Any) -> Any:
    # Clients sometimes send back the nested {"id": .., "title": ..} objects they received.
    if isinstance(value, Mapping):
        return value.get('id')
    return value


def to_node_id(value: Any) -> Optional[int]:
    """Positive integer id, or None when the value cannot be an id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if isinstance(value, int):
        return value if 0 < value <= MAX_NODE_ID else None
    return None


@dataclass(frozen=True)
class AddressSelection:
    """Raw, unvalidated selection. Values are kept exactly as received."""
    province: Any = None
    city: Any = None
    suburbs: Tuple[Any, ...] = ()
    district: Any = None
    settlement: Any = None
    community: Any = None
    village: Any = None
    line: str = ''

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'AddressSelection':
        values = {}
        for name, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    values[name] = data[alias]
                    break
        return cls(**cls._coerce(values))

    @staticmethod
    def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
        coerced = {}
        for name, value in values.items():
            if name == 'suburbs':
                if _is_blank(value):
                    value = ()
                elif isinstance(value, (list, tuple, set)):
                    value = tuple(unwrap_reference(v) for v in value)
                else:
                    value = (unwrap_reference(value),)
            elif name == 'line':
                value = '' if value is None else str(value)
            else:
                value = unwrap_reference(value)
            coerced[name] = value
        return coerced

    def merged(self, patch: Mapping[str, Any]) -> 'AddressSelection':
        """Selection with the fields present in `patch` overriding this one."""
        patch_selection = AddressSelection.from_mapping(patch)
        overrides = {}
        for name, aliases in FIELD_ALIASES.items():
            if any(alias in patch for alias in aliases):
                overrides[name] = getattr(patch_selection, name)
        return replace(self, **overrides)

    def as_dict(self) -> Dict[str, Any]:
        return {name: (list(getattr(self, name)) if name == 'suburbs' else getattr(self, name)) for name in SELECTION_FIELDS}

    def is_present(self, name: str) -> bool:
        value = getattr(self, name)
        if name == 'suburbs':
            return any(not _is_blank(v) for v in value)
        if name == 'line':
            return bool(value and value.strip())
        return not _is_blank(value)

    @property
    def has_city_branch(self) -> bool:
        return self.is_present('city') or self.is_present('suburbs')

    @property
    def has_district_branch(self) -> bool:
        return any(self.is_present(name) for name in ('district', 'settlement', 'community', 'village'))


@dataclass(frozen=True)
class CityBranch:
    city_id: int
    suburb_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class SettlementLeaf:
    settlement_id: int
    village_id: Optional[int] = None


@dataclass(frozen=True)
class CommunityLeaf:
    community_id: int


@dataclass(frozen=True)
class DistrictBranch:
    district_id: int
    leaf: Optional[Union[SettlementLeaf, CommunityLeaf]] = None


Branch = Union[CityBranch, DistrictBranch]


@dataclass(frozen=True)
class AddressData:
    """Normalized, immutable address: a province plus at most one branch."""
    province_id: Optional[int]
    branch: Optional[Branch] = None
    line: str = ''

    @property
    def city_id(self) -> Optional[int]:
        return self.branch.city_id if isinstance(self.branch, CityBranch) else None

    @property
    def suburb_ids(self) -> Tuple[int, ...]:
        return self.branch.suburb_ids if isinstance(self.branch, CityBranch) else ()

    @property
    def district_id(self) -> Optional[int]:
        return self.branch.district_id if isinstance(self.branch, DistrictBranch) else None

    @property
    def settlement_id(self) -> Optional[int]:
        leaf = self.branch.leaf if isinstance(self.branch, DistrictBranch) else None
        return leaf.settlement_id if isinstance(leaf, SettlementLeaf) else None

    @property
    def village_id(self) -> Optional[int]:
        leaf = self.branch.leaf if isinstance(self.branch, DistrictBranch) else None
        return leaf.village_id if isinstance(leaf, SettlementLeaf) else None

    @property
    def community_id(self) -> Optional[int]:
        leaf = self.branch.leaf if isinstance(self.branch, DistrictBranch) else None
        return leaf.community_id if isinstance(leaf, CommunityLeaf) else None

    @property
    def is_empty(self) -> bool:
        return self.province_id is None and self.branch is None and not self.line

    def node_ids(self) -> List[int]:
        """Referenced node ids in canonical rendering order."""
        ids = [self.province_id, self.city_id, self.district_id, *self.suburb_ids,
               self.settlement_id, self.community_id, self.village_id]
        return [node_id for node_id in ids if node_id is not None]

    def to_selection(self) -> AddressSelection:
        return AddressSelection(
            province=self.province_id, city=self.city_id, suburbs=self.suburb_ids,
            district=self.district_id, settlement=self.settlement_id,
            community=self.community_id, village=self.village_id, line=self.line,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'province': self.province_id,
            'city': self.city_id,
            'suburbs': list(self.suburb_ids),
            'district': self.district_id,
            'settlement': self.settlement_id,
            'community': self.community_id,
            'village': self.village_id,
            'line': self.line,
        }

    @classmethod
    def from_references(cls, province_id=None, city_id=None, suburb_ids: Iterable[int] = (),
                        district_id=None, settlement_id=None, community_id=None,
                        village_id=None, line: str = '') -> 'AddressData':
        """Snapshot of stored references. Detached (cleared) fields are simply absent."""
        branch: Optional[Branch] = None
        if city_id:
            branch = CityBranch(city_id, tuple(sorted(set(suburb_ids))))
        elif district_id:
            leaf: Optional[Union[SettlementLeaf, CommunityLeaf]] = None
            if settlement_id:
                leaf = SettlementLeaf(settlement_id, village_id or None)
            elif community_id:
                leaf = CommunityLeaf(community_id)
            branch = DistrictBranch(district_id, leaf)
        return cls(province_id=province_id or None, branch=branch, line=line or '')


NodeResolver = Callable[[Iterable[int]], Mapping[int, Any]]


def db_resolver(node_ids: Iterable[int]) -> Dict[int, LocationNode]:
    """Load referenced nodes in one query."""
    ids = set(node_ids)
    if not ids:
        return {}
    return {node.pk: node for node in LocationNode.objects.filter(pk__in=ids).only('id', 'kind', 'parent_id')}


@dataclass
class ValidationResult:
    data: Optional[AddressData] = None
    violations: List[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations and self.data is not None


def _structural_violations(selection: AddressSelection) -> List[Violation]:
    violations = []
    if not selection.is_present('province'):
        violations.append(Violation(ViolationKind.MISSING_REQUIRED_FIELD, 'province', 'province is required'))

    conflict = selection.has_city_branch and selection.has_district_branch
    if conflict:
        violations.append(Violation(
            ViolationKind.BRANCH_CONFLICT, 'branch', 'city and district branches are mutually exclusive',
        ))

    if selection.is_present('village') and not selection.is_present('settlement'):
        violations.append(Violation(ViolationKind.DEPENDENCY_VIOLATION, 'village', 'village requires settlement'))

    if selection.is_present('settlement') and selection.is_present('community'):
        violations.append(Violation(ViolationKind.BRANCH_CONFLICT, 'community', 'settlement/community exclusive'))

    if len(normalize_line(selection.line)) > ADDRESS_LINE_MAX_LENGTH:
        violations.append(Violation(
            ViolationKind.LINE_TOO_LONG, 'line', f'line must be at most {ADDRESS_LINE_MAX_LENGTH} characters',
        ))

    if not conflict:
        if selection.is_present('suburbs') and not selection.is_present('city'):
            violations.append(Violation(ViolationKind.DEPENDENCY_VIOLATION, 'suburbs', 'suburb requires city'))
        for name in ('settlement', 'community'):
            if selection.is_present(name) and not selection.is_present('district'):
                violations.append(Violation(ViolationKind.DEPENDENCY_VIOLATION, name, f'{name} requires district'))
    return violations


def _reference_violations(selection: AddressSelection, ids: Dict[str, Any], resolver: NodeResolver) -> List[Violation]:
    wanted = set()
    for name, value in ids.items():
        if name == 'suburbs':
            wanted.update(v for v in value if v is not None)
        elif value is not None:
            wanted.add(value)
    nodes = resolver(wanted)

    violations = []
    for name, (kind, parent_field) in REFERENCE_FIELDS.items():
        if not selection.is_present(name):
            continue
        expected_parent = ids.get(parent_field) if parent_field else None
        if name == 'suburbs':
            values = ids[name]
            raw_values = [v for v in selection.suburbs if not _is_blank(v)]
        else:
            values, raw_values = [ids[name]], [getattr(selection, name)]
        for node_id, raw in zip(values, raw_values):
            node = nodes.get(node_id) if node_id is not None else None
            if node is None or node.kind != kind or node.parent_id != expected_parent:
                violations.append(Violation(
                    ViolationKind.INVALID_REFERENCE, name,
                    f'{name} #{raw} does not exist or does not belong to the selected {parent_field or "hierarchy"}',
                ))
    return violations


def validate_selection(selection: AddressSelection, resolver: Optional[NodeResolver] = None) -> ValidationResult:
    """Run every rule; return normalized data only when nothing is violated."""
    violations = _structural_violations(selection)
    if violations:
        return ValidationResult(violations=violations)

    ids: Dict[str, Any] = {
        name: to_node_id(getattr(selection, name)) if selection.is_present(name) else None
        for name in REFERENCE_FIELDS if name != 'suburbs'
    }
    ids['suburbs'] = [to_node_id(v) for v in selection.suburbs if not _is_blank(v)]

    violations = _reference_violations(selection, ids, resolver or db_resolver)
    if violations:
        return ValidationResult(violations=violations)

    data = AddressData.from_references(
        province_id=ids['province'],
        city_id=ids['city'],
        suburb_ids=ids['suburbs'],
        district_id=ids['district'],
        settlement_id=ids['settlement'],
        community_id=ids['community'],
        village_id=ids['village'],
        line=normalize_line(selection.line),
    )
    return ValidationResult(data=data)


def build_address_data(selection: Union[AddressSelection, Mapping[str, Any]],
                       resolver: Optional[NodeResolver] = None) -> AddressData:
    """Validated AddressData, or InvalidAddress carrying every violation."""
    if not isinstance(selection, AddressSelection):
        selection = AddressSelection.from_mapping(selection)
    result = validate_selection(selection, resolver)
    if not result.is_valid:
        logger.info(f"Rejected address selection: {[v.to_dict() for v in result.violations]}")
        raise InvalidAddress(violations=result.violations)
    return result.data
