"""
Рушій компонування сімейного дерева.
Розміщує людей і вузли союзів (зверху вниз) та формує список ребер.
"""

from typing import Dict, List, Optional, Set, Tuple

from family_models import (EDGE_DIRECT, EDGE_PARENT_UNION, EDGE_SPOUSAL,
                           EDGE_UNION_CHILD, FamilyGraph, LayoutEdge,
                           LayoutResult, PersonPosition, PositionedNode,
                           UnionPosition, union_id)
from family_units import FamilyUnit, plan_family_units
from width_calculator import (H_GAP, NODE_WIDTH, PARTNER_GAP,
                              SubtreeWidthCalculator)

# --- КОНСТАНТИ РОЗМІРІВ ---
NODE_HEIGHT = 45
V_GAP = 80
UNION_OFFSET = 0.5
TREE_GAP = NODE_WIDTH * 2


class _LayoutState:
    """Accumulates output of one calculate_layout() call."""

    def __init__(self):
        self.nodes: List[PositionedNode] = []
        self.edges: List[LayoutEdge] = []
        self.people: Dict[str, PersonPosition] = {}
        self.linked: Set[Tuple[str, str]] = set()

    def add_edge(self, source: str, target: str, kind: str):
        self.edges.append(LayoutEdge(source, target, kind))


class LayoutEngine:
    def __init__(self, node_width: float = NODE_WIDTH, partner_gap: float = PARTNER_GAP,
                 horizontal_gap: float = H_GAP, vertical_spacing: float = NODE_HEIGHT + V_GAP,
                 union_offset: float = UNION_OFFSET, tree_gap: float = TREE_GAP,
                 union_for_single_child: bool = True, sort_siblings: bool = False):
        self.node_width = node_width
        self.partner_gap = partner_gap
        self.horizontal_gap = horizontal_gap
        self.vertical_spacing = vertical_spacing
        self.union_offset = union_offset
        self.tree_gap = tree_gap
        self.union_for_single_child = union_for_single_child
        self.sort_siblings = sort_siblings

    def make_width_calculator(self) -> SubtreeWidthCalculator:
        return SubtreeWidthCalculator(self.node_width, self.partner_gap, self.horizontal_gap)

    def calculate_layout(self, graph: FamilyGraph, max_width: Optional[float] = None) -> LayoutResult:
        """
        Lays out a graph whose generations are already assigned.

        The tree of graph.root_id is centered at x = 0; trees not reachable
        from it follow to the right, tree_gap apart.
        """
        if graph.is_empty:
            return LayoutResult(root_id=graph.root_id, root_fallback=graph.root_fallback)

        units = plan_family_units(graph, sort_siblings=self.sort_siblings)
        widths = self.make_width_calculator()
        state = _LayoutState()

        right_edge = 0.0
        for i, unit in enumerate(units):
            tree_width = widths.width(unit)
            if i == 0:
                available = max(tree_width, max_width or 0)
                center = 0.0
            else:
                available = tree_width
                center = right_edge + self.tree_gap + tree_width / 2
            self._layout_unit(graph, unit, center, available, widths, state)
            right_edge = center + available / 2

        self._add_spousal_edges(graph, state)
        self._add_loose_parent_edges(graph, state)

        return LayoutResult(
            nodes=tuple(state.nodes),
            edges=tuple(state.edges),
            root_id=graph.root_id,
            root_fallback=graph.root_fallback,
        )

    def _layout_unit(self, graph: FamilyGraph, unit: FamilyUnit, center_x: float,
                     available: float, widths: SubtreeWidthCalculator, state: _LayoutState):
        """Розміщує сімейну одиницю та рекурсивно її нащадків."""
        y = unit.generation * self.vertical_spacing

        # Партнери симетрично навколо центру
        step = self.node_width + self.partner_gap
        first_x = center_x - (len(unit.members) - 1) * step / 2
        for i, member in enumerate(unit.members):
            pos = PersonPosition(member, first_x + i * step, y, unit.generation, graph.nodes[member])
            state.nodes.append(pos)
            state.people[member] = pos

        children = unit.children
        if not children:
            return

        slots = self._child_slots(children, center_x, available, widths)

        for group in unit.groups:
            child_ids = tuple(child.anchor for child in group.children)

            if group.is_shared and (len(child_ids) >= 2 or self.union_for_single_child):
                p1, p2 = group.parents
                union = UnionPosition(
                    union_id(p1, p2),
                    (state.people[p1].x + state.people[p2].x) / 2,
                    y + self.union_offset * self.vertical_spacing,
                    (p1, p2),
                    child_ids,
                )
                state.nodes.append(union)
                state.add_edge(p1, union.id, EDGE_PARENT_UNION)
                state.add_edge(p2, union.id, EDGE_PARENT_UNION)
                for child_id in child_ids:
                    state.add_edge(union.id, child_id, EDGE_UNION_CHILD)
                    state.linked.update({(p1, child_id), (p2, child_id)})
            else:
                for child_id in child_ids:
                    for parent_id in group.parents:
                        state.add_edge(parent_id, child_id, EDGE_DIRECT)
                        state.linked.add((parent_id, child_id))

            for child in group.children:
                self._layout_unit(graph, child, slots[child.anchor], widths.width(child), widths, state)

    def _child_slots(self, children: List[FamilyUnit], center_x: float, available: float,
                     widths: SubtreeWidthCalculator) -> Dict[str, float]:
        """
        Centers of the children, left to right. Space beyond the packed
        children is shared in proportion to each child's subtree width.
        """
        child_widths = [widths.width(child) for child in children]
        total = sum(child_widths)
        packed = total + (len(children) - 1) * self.horizontal_gap
        extra = max(available - packed, 0)

        slots = {}
        left = center_x - max(available, packed) / 2
        for child, w in zip(children, child_widths):
            slot = w + (extra * w / total if total else 0)
            slots[child.anchor] = left + slot / 2
            left += slot + self.horizontal_gap
        return slots

    def _add_spousal_edges(self, graph: FamilyGraph, state: _LayoutState):
        done = set()
        for node_id, pos in state.people.items():
            for spouse_id in graph.spouses_of(node_id):
                pair = frozenset((node_id, spouse_id))
                if spouse_id not in state.people or pair in done:
                    continue
                done.add(pair)
                other = state.people[spouse_id]
                left, right = (pos, other) if (pos.x, pos.id) <= (other.x, other.id) else (other, pos)
                state.add_edge(left.id, right.id, EDGE_SPOUSAL)

    def _add_loose_parent_edges(self, graph: FamilyGraph, state: _LayoutState):
        """Parent links the unit groups did not cover, e.g. across separate trees."""
        for child_id in state.people:
            for parent_id in graph.parents_of(child_id):
                if parent_id in state.people and (parent_id, child_id) not in state.linked:
                    state.add_edge(parent_id, child_id, EDGE_DIRECT)
                    state.linked.add((parent_id, child_id))
