"""
Планування сімейних одиниць для компонування.

Сімейна одиниця - людина разом із партнерами, що стоять поруч із нею.
Кожна дитина належить рівно одній групі дітей (спільній для пари або
одному з батьків), тому рекурсія ширини та розміщення бачить кожну
людину лише один раз.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from family_models import SEX_MALE, FamilyGraph, FamilyNode


@dataclass(frozen=True)
class ChildGroup:
    parents: Tuple[str, ...]
    children: Tuple['FamilyUnit', ...]

    @property
    def is_shared(self) -> bool:
        return len(self.parents) == 2


@dataclass(frozen=True)
class FamilyUnit:
    anchor: str
    members: Tuple[str, ...]
    generation: int
    groups: Tuple[ChildGroup, ...] = ()

    @property
    def children(self) -> List['FamilyUnit']:
        return [child for group in self.groups for child in group.children]

    @property
    def partner(self) -> Optional[str]:
        others = [m for m in self.members if m != self.anchor]
        return others[0] if others else None


def traditional_sibling_key(node: FamilyNode):
    """Sons first, then by birth year."""
    return (0 if node.sex == SEX_MALE else 1, node.birth_year or 0)


class FamilyUnitPlanner:
    def __init__(self, graph: FamilyGraph, sort_siblings: bool = False):
        self.graph = graph
        self.sort_siblings = sort_siblings
        self._order = {node_id: i for i, node_id in enumerate(graph.nodes)}

    def plan(self) -> List[FamilyUnit]:
        """Units of the whole forest; the tree of root_id comes first."""
        if self.graph.is_empty:
            return []

        claimed: Set[str] = set()
        forest = []
        for start in self._start_order():
            if start not in claimed:
                forest.append(self._plan_unit(start, claimed))
        return forest

    def _start_order(self) -> List[str]:
        order = []
        if self.graph.root_id in self.graph:
            order.append(self.graph.root_id)
        order.extend(r for r in self.graph.root_ids if r not in order)
        rest = sorted(
            (n for n in self.graph if n.id not in order),
            key=lambda n: (n.generation, self._order[n.id]),
        )
        order.extend(n.id for n in rest)
        return order

    def _partners(self, node_id: str, claimed: Set[str]) -> List[str]:
        """Spouses, then co-parents of shared children, of the same generation."""
        gen = self.graph.nodes[node_id].generation
        candidates = list(self.graph.spouses_of(node_id))
        for child_id in self.graph.children_of(node_id):
            for p in self.graph.parents_of(child_id):
                if p != node_id and p not in candidates:
                    candidates.append(p)
        return [
            p for p in candidates
            if p not in claimed and self.graph.nodes[p].generation == gen
        ]

    def _order_members(self, node_id: str, partners: List[str]) -> Tuple[str, ...]:
        members = [node_id] + partners
        if len(members) == 2:
            # Чоловік ліворуч, дружина праворуч
            members.sort(key=lambda m: 0 if self.graph.nodes[m].sex == SEX_MALE else 1)
        return tuple(members)

    def _plan_unit(self, node_id: str, claimed: Set[str]) -> FamilyUnit:
        claimed.add(node_id)
        partners = self._partners(node_id, claimed)
        claimed.update(partners)
        members = self._order_members(node_id, partners)

        # Розподіл дітей по групах: спільні діти пари або діти одного з батьків
        grouped: Dict[Tuple[str, ...], List[str]] = {}
        seen = set()
        for member in members:
            for child_id in self.graph.children_of(member):
                if child_id in claimed or child_id in seen:
                    continue
                seen.add(child_id)
                child_parents = self.graph.parents_of(child_id)
                key = tuple(m for m in members if m in child_parents)[:2]
                grouped.setdefault(key, []).append(child_id)

        index = {m: i for i, m in enumerate(members)}
        keys = sorted(grouped, key=lambda k: sum(index[m] for m in k) / len(k))

        groups = []
        for key in keys:
            child_ids = grouped[key]
            if self.sort_siblings:
                child_ids = sorted(child_ids, key=lambda c: traditional_sibling_key(self.graph.nodes[c]))
            units = []
            for child_id in child_ids:
                # Дитину могли вже взяти як партнера старшого брата чи сестри
                if child_id in claimed:
                    continue
                units.append(self._plan_unit(child_id, claimed))
            if units:
                groups.append(ChildGroup(parents=key, children=tuple(units)))

        return FamilyUnit(
            anchor=node_id,
            members=members,
            generation=self.graph.nodes[node_id].generation,
            groups=tuple(groups),
        )


def plan_family_units(graph: FamilyGraph, sort_siblings: bool = False) -> List[FamilyUnit]:
    return FamilyUnitPlanner(graph, sort_siblings=sort_siblings).plan()
