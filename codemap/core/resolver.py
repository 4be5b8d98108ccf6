"""
Cross-file dependency resolution.

Runs after every file has been extracted. A global index maps each
declared function/method name (and class component name) to the file
that declared it, then every dependency edge whose callee is declared
in a different file is rewritten to point there.

Known limitation: this is not scope- or import-aware. When the same
name is declared in several files the first declaring file in input
order wins, and the collision is reported rather than disambiguated.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from .entities import DependencyEdge, FileAnalysis

logger = logging.getLogger(__name__)


@dataclass
class SymbolIndex:
    """
    Name -> declaring file, first declaration wins.

    ``collisions`` maps a name to every file that declared it, in input
    order, for names declared in more than one file.
    """
    definitions: Dict[str, str] = field(default_factory=dict)
    collisions: Dict[str, List[str]] = field(default_factory=dict)

    def register(self, name: str, file_name: str):
        """Register a declaration; later files never replace an earlier one."""
        existing = self.definitions.get(name)
        if existing is None:
            self.definitions[name] = file_name
            return
        if existing == file_name:
            return

        files = self.collisions.setdefault(name, [existing])
        if file_name not in files:
            files.append(file_name)
            logger.warning(
                "Name '%s' is declared in %s; resolving calls to %s",
                name, ", ".join(files), existing,
            )

    def lookup(self, name: str) -> Optional[str]:
        return self.definitions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)


def build_symbol_index(analyses: List[FileAnalysis]) -> SymbolIndex:
    """
    Index every function, method and class component across files.

    Args:
        analyses: Per-file results in input order

    Returns:
        SymbolIndex with first-declaring-file semantics
    """
    index = SymbolIndex()
    for analysis in analyses:
        for func in analysis.functions:
            index.register(func.name, analysis.file_name)
        for component in analysis.components:
            if component.is_class:
                index.register(component.name, analysis.file_name)
    return index


def resolve_edge(edge: DependencyEdge, index: SymbolIndex) -> DependencyEdge:
    """Point an edge at its declaring file when that file is another one."""
    target = index.lookup(edge.callee)
    if target is None or target == edge.caller_file:
        return edge
    return replace(edge, callee_file=target, is_cross_file=True)


def resolve_dependencies(analyses: List[FileAnalysis],
                         index: Optional[SymbolIndex] = None) -> List[FileAnalysis]:
    """
    Rewrite cross-file edges in every file.

    Args:
        analyses: Per-file results in input order
        index: Prebuilt index (built from ``analyses`` when omitted)

    Returns:
        New FileAnalysis list, same order, each carrying its resolved edges
    """
    if index is None:
        index = build_symbol_index(analyses)

    resolved: List[FileAnalysis] = []
    cross_file = 0
    for analysis in analyses:
        edges = tuple(resolve_edge(edge, index) for edge in analysis.dependencies)
        cross_file += sum(1 for edge in edges if edge.is_cross_file)
        resolved.append(replace(analysis, dependencies=edges))

    logger.debug(
        "Resolved %d cross-file edges against %d symbols", cross_file, len(index)
    )
    return resolved
