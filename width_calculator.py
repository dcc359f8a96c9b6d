"""
Обчислення ширини піддерев (знизу вгору).
"""

from typing import Dict

from family_units import FamilyUnit

# --- КОНСТАНТИ РОЗМІРІВ ---
NODE_WIDTH = 140
H_GAP = 30
PARTNER_GAP = 8


class SubtreeWidthCalculator:
    """
    Width of a family unit and all its descendants.

    A unit of k people needs k * node_width + (k - 1) * partner_gap.
    A unit with children needs at least the children side by side with
    horizontal_gap between them. Results are cached per unit anchor, so
    call clear_cache() before reusing the calculator for another plan.
    """

    def __init__(self, node_width: float = NODE_WIDTH, partner_gap: float = PARTNER_GAP,
                 horizontal_gap: float = H_GAP):
        self.node_width = node_width
        self.partner_gap = partner_gap
        self.horizontal_gap = horizontal_gap
        self.width_cache: Dict[str, float] = {}

    def clear_cache(self):
        self.width_cache.clear()

    def own_width(self, unit: FamilyUnit) -> float:
        k = len(unit.members)
        return k * self.node_width + (k - 1) * self.partner_gap

    def children_width(self, unit: FamilyUnit) -> float:
        children = unit.children
        if not children:
            return 0
        total = 0
        for child in children:
            total += self.width(child)
        return total + (len(children) - 1) * self.horizontal_gap

    def width(self, unit: FamilyUnit) -> float:
        if unit.anchor in self.width_cache:
            return self.width_cache[unit.anchor]

        own = self.own_width(unit)
        if unit.children:
            result = max(own, self.children_width(unit))
        else:
            result = own

        self.width_cache[unit.anchor] = result
        return result
