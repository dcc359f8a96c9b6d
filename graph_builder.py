"""
Побудова графа родинних зв'язків із пласких записів.
"""

from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Union

import networkx as nx

from family_models import (REL_CHILD, REL_PARTNER, FamilyGraph, FamilyNode,
                           PersonRecord)

RecordLike = Union[PersonRecord, Mapping]


def coerce_records(records: Sequence[RecordLike]) -> List[PersonRecord]:
    """Accepts PersonRecord objects or API member dicts; anything else is a programming error."""
    if not isinstance(records, (list, tuple)):
        raise TypeError(f"Expected a list of member records, got {type(records).__name__}")

    result = []
    for item in records:
        if isinstance(item, PersonRecord):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(PersonRecord.from_dict(item))
        else:
            raise TypeError(f"Unsupported member record: {type(item).__name__}")
    return result


def _append_unique(target: List[str], values: Iterable[str], exclude: str = None):
    for value in values:
        if value != exclude and value not in target:
            target.append(value)


def build_family_graph(records: Sequence[RecordLike]) -> FamilyGraph:
    """
    Turns flat records into a FamilyGraph with symmetric parent/child and
    spouse relations. Root and generations are left to the later stages.

    Duplicate ids: the last record wins but keeps the first position.
    References to unknown ids stay on the node as dangling references.
    """
    people = coerce_records(records)

    lookup: Dict[str, PersonRecord] = {}
    for person in people:
        lookup[person.id] = person

    graph = nx.DiGraph()
    for person_id, person in lookup.items():
        graph.add_node(person_id, label=person.name, sex=person.sex)

    # Записані зв'язки, включно з висячими посиланнями
    parents = defaultdict(list)
    children = defaultdict(list)
    spouses = defaultdict(list)

    for person_id, person in lookup.items():
        # Батьки з полів father/mother/parent
        for parent_id in person.parent_refs():
            if parent_id == person_id:
                continue
            _append_unique(parents[person_id], [parent_id])
            if parent_id in lookup:
                graph.add_edge(parent_id, person_id, type=REL_CHILD)

        # Явний список дітей
        for child_id in person.children_ids or ():
            if child_id == person_id:
                continue
            _append_unique(children[person_id], [child_id])
            if child_id in lookup:
                graph.add_edge(person_id, child_id, type=REL_CHILD)

        if person.spouse_id and person.spouse_id != person_id:
            _append_unique(spouses[person_id], [person.spouse_id])
            if person.spouse_id in lookup:
                graph.add_edge(person_id, person.spouse_id, type=REL_PARTNER)
                graph.add_edge(person.spouse_id, person_id, type=REL_PARTNER)

    # Симетризація через граф
    for person_id in lookup:
        _append_unique(parents[person_id], [
            u for u, _, a in graph.in_edges(person_id, data=True) if a.get('type') == REL_CHILD
        ])
        _append_unique(children[person_id], [
            v for _, v, a in graph.out_edges(person_id, data=True) if a.get('type') == REL_CHILD
        ])
        _append_unique(spouses[person_id], [
            v for _, v, a in graph.out_edges(person_id, data=True) if a.get('type') == REL_PARTNER
        ])

    # Брати/сестри: спільний хоча б один із батьків
    by_parent = defaultdict(list)
    for person_id in lookup:
        for parent_id in parents[person_id]:
            by_parent[parent_id].append(person_id)

    nodes = {}
    for person_id, person in lookup.items():
        siblings = []
        for parent_id in parents[person_id]:
            _append_unique(siblings, by_parent[parent_id], exclude=person_id)

        nodes[person_id] = FamilyNode(
            id=person_id,
            name=person.name,
            sex=person.sex,
            parents=tuple(parents[person_id]),
            children=tuple(children[person_id]),
            siblings=tuple(siblings),
            spouses=tuple(spouses[person_id]),
            generation=person.generation if person.generation is not None else 1,
            generation_hint=person.generation,
            birth_year=person.birth_year,
            death_year=person.death_year,
            image=person.image,
            occupation=person.occupation,
        )

    return FamilyGraph(nodes=MappingProxyType(nodes), graph=nx.freeze(graph))
