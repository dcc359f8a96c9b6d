"""
Моделі даних сімейного дерева.
Вхідні записи, вузли графа та елементи компонування (позиції та ребра).
"""

import math
import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import networkx as nx

# --- ТИПИ ЗВ'ЯЗКІВ У ГРАФІ ---
REL_PARTNER = 'partner'
REL_CHILD = 'child'

# --- ТИПИ РЕБЕР КОМПОНУВАННЯ ---
EDGE_PARENT_UNION = 'parent-union'
EDGE_UNION_CHILD = 'union-child'
EDGE_DIRECT = 'direct-parent-child'
EDGE_SPOUSAL = 'spousal'

SEX_MALE = 'male'
SEX_FEMALE = 'female'
SEX_OTHER = 'other'

DEFAULT_NAME = 'Unknown'

_YEAR_RE = re.compile(r'^\s*(-?\d{1,4})(?!\d)')


def normalize_sex(value: Any) -> str:
    if not value:
        return SEX_OTHER
    v = str(value).strip().lower()
    if v in ('male', 'm'):
        return SEX_MALE
    if v in ('female', 'f'):
        return SEX_FEMALE
    return SEX_OTHER


def parse_year(year: Any = None, date: Any = None) -> Optional[int]:
    """Explicit year wins; otherwise the leading year of an ISO date string."""
    for value in (year, date):
        if value is None or value == '' or isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else None
        if hasattr(value, 'year'):
            return int(value.year)
        match = _YEAR_RE.match(str(value))
        if match:
            return int(match.group(1))
    return None


def normalize_ref(value: Any) -> Optional[str]:
    if value is None:
        return None
    ref = str(value).strip()
    return ref or None


def _parse_generation(value: Any) -> Optional[int]:
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class PersonRecord:
    """One family member as handed over by the persistence layer."""
    id: str
    name: str = DEFAULT_NAME
    sex: str = SEX_OTHER
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    father_id: Optional[str] = None
    mother_id: Optional[str] = None
    parent_id: Optional[str] = None
    spouse_id: Optional[str] = None
    children_ids: Optional[Tuple[str, ...]] = None
    generation: Optional[int] = None
    image: Optional[str] = None
    occupation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PersonRecord':
        """
        Builds a record from an API-style member dict.
        Accepts both the API field names (_id, fullName, fatherId, ...) and
        the snake_case names of this class.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Member must be a mapping, got {type(data).__name__}")

        record_id = normalize_ref(data.get('_id', data.get('id')))
        if record_id is None:
            raise ValueError(f"Member without identifier: {dict(data)!r}")

        def pick(*keys):
            for key in keys:
                if data.get(key) not in (None, ''):
                    return data[key]
            return None

        raw_children = pick('childrenIds', 'children_ids', 'children')
        children = None
        if raw_children is not None:
            if isinstance(raw_children, (str, bytes)) or not hasattr(raw_children, '__iter__'):
                raise TypeError(f"childrenIds of {record_id} must be a list")
            children = tuple(ref for ref in (normalize_ref(c) for c in raw_children) if ref)

        return cls(
            id=record_id,
            name=str(pick('fullName', 'name') or DEFAULT_NAME),
            sex=normalize_sex(pick('gender', 'sex')),
            birth_year=parse_year(pick('birthYear', 'birth_year'), pick('birthDate', 'birth_date')),
            death_year=parse_year(pick('deathYear', 'death_year'), pick('deathDate', 'death_date')),
            father_id=normalize_ref(pick('fatherId', 'father_id')),
            mother_id=normalize_ref(pick('motherId', 'mother_id')),
            parent_id=normalize_ref(pick('parentId', 'parent_id')),
            spouse_id=normalize_ref(pick('spouseId', 'spouse_id')),
            children_ids=children,
            generation=_parse_generation(data.get('generation')),
            image=pick('image'),
            occupation=pick('occupation'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'fullName': self.name,
            'gender': self.sex.upper(),
            'birthYear': self.birth_year,
            'deathYear': self.death_year,
            'fatherId': self.father_id,
            'motherId': self.mother_id,
            'parentId': self.parent_id,
            'spouseId': self.spouse_id,
            'childrenIds': list(self.children_ids) if self.children_ids is not None else None,
            'generation': self.generation,
            'image': self.image,
            'occupation': self.occupation,
        }
        return {k: v for k, v in data.items() if v is not None}

    def parent_refs(self) -> List[str]:
        """Father, mother, then the legacy parent field if it is a new id."""
        refs = []
        for ref in (self.father_id, self.mother_id, self.parent_id):
            if ref and ref not in refs:
                refs.append(ref)
        return refs


@dataclass(frozen=True)
class FamilyNode:
    id: str
    name: str
    sex: str
    parents: Tuple[str, ...] = ()
    children: Tuple[str, ...] = ()
    siblings: Tuple[str, ...] = ()
    spouses: Tuple[str, ...] = ()
    generation: int = 1
    generation_hint: Optional[int] = None
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    image: Optional[str] = None
    occupation: Optional[str] = None


@dataclass(frozen=True)
class FamilyGraph:
    """
    Immutable kinship graph.

    `nodes` keeps input order. `graph` holds only the resolvable relations:
    REL_CHILD edges parent -> child and REL_PARTNER edges in both directions.
    Dangling identifiers stay in the FamilyNode tuples but never become edges.
    """
    nodes: Mapping[str, FamilyNode] = field(default_factory=lambda: MappingProxyType({}))
    graph: nx.DiGraph = field(default_factory=lambda: nx.freeze(nx.DiGraph()))
    root_id: str = ''
    root_ids: Tuple[str, ...] = ()
    root_fallback: bool = False

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id):
        return node_id in self.nodes

    def __iter__(self):
        return iter(self.nodes.values())

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def get(self, node_id: str) -> Optional[FamilyNode]:
        return self.nodes.get(node_id)

    def parents_of(self, node_id: str) -> List[str]:
        node = self.nodes.get(node_id)
        return [p for p in node.parents if p in self.nodes] if node else []

    def children_of(self, node_id: str) -> List[str]:
        node = self.nodes.get(node_id)
        return [c for c in node.children if c in self.nodes] if node else []

    def spouses_of(self, node_id: str) -> List[str]:
        node = self.nodes.get(node_id)
        return [s for s in node.spouses if s in self.nodes] if node else []

    def dangling_references(self) -> List[Tuple[str, str]]:
        """(node id, missing id) pairs in input order."""
        missing = []
        for node in self.nodes.values():
            for ref in node.parents + node.children + node.spouses:
                if ref not in self.nodes and (node.id, ref) not in missing:
                    missing.append((node.id, ref))
        return missing

    def with_root(self, root_id: str, root_ids: Tuple[str, ...], fallback: bool) -> 'FamilyGraph':
        return replace(self, root_id=root_id, root_ids=tuple(root_ids), root_fallback=fallback)

    def with_generations(self, generations: Mapping[str, int]) -> 'FamilyGraph':
        nodes = {
            node_id: replace(node, generation=generations.get(node_id, node.generation))
            for node_id, node in self.nodes.items()
        }
        return replace(self, nodes=MappingProxyType(nodes))


# --- ЕЛЕМЕНТИ КОМПОНУВАННЯ ---

@dataclass(frozen=True)
class PersonPosition:
    id: str
    x: float
    y: float
    generation: int
    person: FamilyNode
    kind: str = field(default='person', init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id, 'kind': self.kind, 'x': self.x, 'y': self.y,
            'generation': self.generation, 'name': self.person.name, 'gender': self.person.sex,
            'birthYear': self.person.birth_year, 'deathYear': self.person.death_year,
            'image': self.person.image, 'occupation': self.person.occupation,
        }


@dataclass(frozen=True)
class UnionPosition:
    id: str
    x: float
    y: float
    parents: Tuple[str, str]
    children: Tuple[str, ...]
    kind: str = field(default='union', init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id, 'kind': self.kind, 'x': self.x, 'y': self.y,
            'parents': list(self.parents), 'children': list(self.children),
        }


PositionedNode = Union[PersonPosition, UnionPosition]


def union_id(parent_a: str, parent_b: str) -> str:
    a, b = sorted((parent_a, parent_b))
    return f"union-{a}-{b}"


@dataclass(frozen=True)
class LayoutEdge:
    source: str
    target: str
    kind: str

    def to_dict(self) -> Dict[str, str]:
        return {'source': self.source, 'target': self.target, 'kind': self.kind}


@dataclass(frozen=True)
class LayoutResult:
    nodes: Tuple[PositionedNode, ...] = ()
    edges: Tuple[LayoutEdge, ...] = ()
    root_id: str = ''
    root_fallback: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {n.id: (n.x, n.y) for n in self.nodes}

    def people(self) -> List[PersonPosition]:
        return [n for n in self.nodes if isinstance(n, PersonPosition)]

    def unions(self) -> List[UnionPosition]:
        return [n for n in self.nodes if isinstance(n, UnionPosition)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rootId': self.root_id,
            'rootFallback': self.root_fallback,
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
        }
