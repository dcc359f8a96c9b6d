"""
Повний конвеєр: записи -> граф -> корінь -> покоління -> компонування.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from family_models import FamilyGraph, LayoutResult
from generation_assigner import assign_generations
from graph_builder import RecordLike, build_family_graph
from hierarchy import build_tree_data
from layout_engine import LayoutEngine
from root_resolver import resolve_root
from utils.logger_service import LoggerService


@dataclass(frozen=True)
class FamilyTreeResult:
    graph: FamilyGraph
    layout: LayoutResult
    sort_siblings: bool = False

    @property
    def root_id(self) -> str:
        return self.graph.root_id

    def tree_data(self, sort_siblings: Optional[bool] = None) -> Optional[Dict[str, Any]]:
        """Nested tree; by default in the same sibling order as the layout."""
        if sort_siblings is None:
            sort_siblings = self.sort_siblings
        return build_tree_data(self.graph, sort_siblings=sort_siblings)


def prepare_graph(records: Sequence[RecordLike], from_all_roots: bool = False) -> FamilyGraph:
    """Graph with root and generations resolved, ready for layout."""
    graph = build_family_graph(records)
    graph = resolve_root(graph)
    return assign_generations(graph, from_all_roots=from_all_roots)


class FamilyTreePipeline:
    """
    Runs every stage on one record snapshot. The stages themselves are
    pure; only this class writes to the activity log, and only when a
    logger is given.
    """

    def __init__(self, engine: Optional[LayoutEngine] = None,
                 logger: Optional[LoggerService] = None, from_all_roots: bool = False):
        self.engine = engine or LayoutEngine()
        self.logger = logger
        self.from_all_roots = from_all_roots

    def run(self, records: Sequence[RecordLike]) -> FamilyTreeResult:
        graph = prepare_graph(records, from_all_roots=self.from_all_roots)
        layout = self.engine.calculate_layout(graph)
        self._report(graph, layout)
        return FamilyTreeResult(graph=graph, layout=layout, sort_siblings=self.engine.sort_siblings)

    def _report(self, graph: FamilyGraph, layout: LayoutResult):
        if self.logger is None:
            return

        if graph.root_fallback:
            self.logger.log("ROOT_FALLBACK", f"No parentless member, using {graph.root_id}")

        dangling = graph.dangling_references()
        if dangling:
            sample = ', '.join(f"{src}->{ref}" for src, ref in dangling[:5])
            self.logger.log("DANGLING_REFS", f"{len(dangling)} unresolved: {sample}")

        self.logger.log(
            "BUILD_LAYOUT",
            f"{len(graph)} members, {len(layout.unions())} unions, "
            f"{len(layout.edges)} edges, root: {graph.root_id or '-'}",
        )
