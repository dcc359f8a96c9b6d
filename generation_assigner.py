"""
Призначення поколінь обходом у ширину від кореня.
"""

from collections import deque
from typing import Dict, FrozenSet, Iterable, Tuple

from family_models import FamilyGraph

ROOT_GENERATION = 1
DEFAULT_GENERATION = 1


def traverse_generations(graph: FamilyGraph, seeds: Iterable[str],
                         visited: FrozenSet[str] = frozenset()) -> Tuple[Dict[str, int], FrozenSet[str]]:
    """
    Breadth-first walk from the seeds at ROOT_GENERATION.

    Children get g + 1, spouses stay at g. A node is stamped once, when it is
    first discovered, so cycles terminate and the first level wins.
    Returns the levels found and the final visited set.
    """
    seen = set(visited)
    gens = {}
    q = deque()

    for seed in seeds:
        if seed in graph and seed not in seen:
            seen.add(seed)
            gens[seed] = ROOT_GENERATION
            q.append((seed, ROOT_GENERATION))

    while q:
        curr, g = q.popleft()

        for c in graph.children_of(curr):
            if c not in seen:
                seen.add(c)
                gens[c] = g + 1
                q.append((c, g + 1))

        for s in graph.spouses_of(curr):
            if s not in seen:
                seen.add(s)
                gens[s] = g
                q.append((s, g))

    return gens, frozenset(seen)


def assign_generations(graph: FamilyGraph, from_all_roots: bool = False) -> FamilyGraph:
    """
    Returns a new graph with every generation finalized.

    Unreached nodes keep their generation hint or get DEFAULT_GENERATION.
    With from_all_roots every root candidate seeds the walk, not only root_id.
    """
    if graph.is_empty or not graph.root_id:
        seeds = []
    elif from_all_roots:
        seeds = [graph.root_id] + [r for r in graph.root_ids if r != graph.root_id]
    else:
        seeds = [graph.root_id]

    gens, _ = traverse_generations(graph, seeds)

    for node in graph:
        if node.id not in gens:
            gens[node.id] = node.generation_hint if node.generation_hint is not None else DEFAULT_GENERATION

    return graph.with_generations(gens)
