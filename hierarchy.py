"""
Ієрархічні представлення графа для споживачів, яким потрібне вкладене дерево
або список членів за поколіннями.
"""

from typing import Any, Dict, List, Optional, Tuple

from family_models import (DEFAULT_NAME, SEX_MALE, FamilyGraph, FamilyNode, PersonRecord,
                           normalize_ref, normalize_sex, parse_year)
from family_units import FamilyUnit, plan_family_units, traditional_sibling_key


def _attributes(node: FamilyNode) -> Dict[str, Any]:
    return {
        'birthYear': node.birth_year,
        'deathYear': node.death_year,
        'gender': node.sex,
        'occupation': node.occupation,
        'generation': node.generation,
        'image': node.image,
    }


def _unit_to_tree(graph: FamilyGraph, unit: FamilyUnit) -> Dict[str, Any]:
    node = graph.nodes[unit.anchor]
    attributes = _attributes(node)

    if unit.partner:
        spouse = graph.nodes[unit.partner]
        attributes.update({
            'spouse': spouse.name,
            'spouseId': spouse.id,
            'spouseImage': spouse.image,
            'spouseBirthYear': spouse.birth_year,
        })

    # всі партнери юніту, включно з другим шлюбом
    partners = [graph.nodes[m] for m in unit.members if m != unit.anchor]
    if partners:
        attributes['partners'] = [
            {'id': p.id, 'name': p.name, 'image': p.image, 'birthYear': p.birth_year}
            for p in partners
        ]

    return {
        'id': node.id,
        'name': node.name,
        'attributes': attributes,
        'children': [_unit_to_tree(graph, child) for child in unit.children],
    }


def build_tree_data(graph: FamilyGraph, sort_siblings: bool = False) -> Optional[Dict[str, Any]]:
    """
    Nested {name, attributes, children} tree of the root's family.

    Uses the same family-unit plan as LayoutEngine, so children come in the
    same left-to-right order as in the layout. None for an empty graph.
    """
    units = plan_family_units(graph, sort_siblings=sort_siblings)
    if not units:
        return None
    return _unit_to_tree(graph, units[0])


def tree_to_records(tree: Optional[Dict[str, Any]]) -> List[PersonRecord]:
    """
    Flattens a nested {name, attributes, children} tree back into records,
    parents before their children.

    Nodes keep their 'id' when they have one; the rest get sequential ids.
    Generation is the depth starting at 1, gender defaults to male.
    """
    if not tree:
        return []

    records: List[PersonRecord] = []
    counter = 0

    def next_id(node: Any) -> str:
        nonlocal counter
        if not isinstance(node, dict):
            raise TypeError(f"Tree node must be a dict, got {type(node).__name__}")
        counter += 1
        return normalize_ref(node.get('id')) or str(counter)

    def visit(node: Dict[str, Any], node_id: str, parent_id: Optional[str], generation: int):
        attrs = node.get('attributes') or {}
        children = node.get('children') or []
        child_ids = [next_id(child) for child in children]

        records.append(PersonRecord(
            id=node_id,
            name=str(node.get('name') or DEFAULT_NAME),
            sex=normalize_sex(attrs.get('gender') or SEX_MALE),
            birth_year=parse_year(attrs.get('birthYear')),
            death_year=parse_year(attrs.get('deathYear')),
            parent_id=parent_id,
            spouse_id=normalize_ref(attrs.get('spouseId')),
            children_ids=tuple(child_ids),
            generation=generation,
            image=attrs.get('image'),
            occupation=attrs.get('occupation'),
        ))

        for child, child_id in zip(children, child_ids):
            visit(child, child_id, node_id, generation + 1)

    visit(tree, next_id(tree), None, 1)
    return records


def group_by_generation(graph: FamilyGraph) -> List[Tuple[int, List[FamilyNode]]]:
    """Members per generation, sons first then by birth year."""
    groups: Dict[int, List[FamilyNode]] = {}
    for node in graph:
        groups.setdefault(node.generation, []).append(node)
    return [
        (gen, sorted(groups[gen], key=traditional_sibling_key))
        for gen in sorted(groups)
    ]


def member_rows(graph: FamilyGraph) -> List[Dict[str, Any]]:
    """Flat generation-stamped rows, input order."""
    rows = []
    for node in graph:
        spouses = graph.spouses_of(node.id)
        rows.append({
            'id': node.id,
            'fullName': node.name,
            'generation': node.generation,
            'birthYear': node.birth_year,
            'deathYear': node.death_year,
            'gender': node.sex,
            'image': node.image,
            'occupation': node.occupation,
            'parentIds': list(node.parents),
            'spouseId': spouses[0] if spouses else None,
            'spouseName': graph.nodes[spouses[0]].name if spouses else None,
            'childrenIds': list(node.children),
        })
    return rows
