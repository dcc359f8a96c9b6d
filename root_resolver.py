"""
Вибір кореня (або коренів) лісу родинних дерев.
"""

from typing import List

from family_models import FamilyGraph


def find_root_candidates(graph: FamilyGraph) -> List[str]:
    """Nodes without any recorded parent, in input order. Dangling parents count as parents."""
    return [node.id for node in graph if not node.parents]


def resolve_root(graph: FamilyGraph) -> FamilyGraph:
    """
    Returns a new graph with root_id set.

    Without a parentless node the root falls back to the lowest generation
    hint, then to the first record; root_fallback marks that case.
    An empty graph keeps an empty root_id.
    """
    if graph.is_empty:
        return graph.with_root('', (), False)

    candidates = find_root_candidates(graph)
    if candidates:
        return graph.with_root(candidates[0], tuple(candidates), False)

    hinted = [node for node in graph if node.generation_hint is not None]
    if hinted:
        lowest = min(node.generation_hint for node in hinted)
        root_id = next(node.id for node in hinted if node.generation_hint == lowest)
    else:
        root_id = next(iter(graph.nodes))

    return graph.with_root(root_id, (root_id,), True)
