"""
File-level dependency graph.

Every resolved DependencyEdge becomes one edge caller_file -> callee_file
in a networkx MultiDiGraph, so parallel edges and same-file edges
(self-loops) are all counted.
"""

from typing import List, Tuple

import networkx as nx

from .entities import FileAnalysis, MostDependedOnFile


def build_file_dependency_graph(analyses: List[FileAnalysis]) -> nx.MultiDiGraph:
    """
    Build the file graph from resolved analyses.

    Nodes are added in input order; each node carries the file's
    total function complexity as ``complexity``.
    """
    graph = nx.MultiDiGraph()
    for analysis in analyses:
        graph.add_node(analysis.file_name, complexity=analysis.total_complexity)

    for analysis in analyses:
        for edge in analysis.dependencies:
            graph.add_edge(
                edge.caller_file,
                edge.callee_file,
                caller=edge.caller,
                callee=edge.callee,
                cross_file=edge.is_cross_file,
            )
    return graph


def most_depended_on(graph: nx.MultiDiGraph) -> MostDependedOnFile:
    """
    File with the most incoming edges.

    Strict maximum over nodes in insertion order, so the earlier file
    keeps a tie. Returns the empty default when no file has any.
    """
    best = MostDependedOnFile()
    for file_name in graph.nodes:
        count = graph.in_degree(file_name)
        if count > best.dependencies:
            best = MostDependedOnFile(file_name=file_name, dependencies=count)
    return best


def file_dependencies(graph: nx.MultiDiGraph, file_name: str) -> List[str]:
    """Other files that ``file_name`` calls into."""
    return [target for target in graph.successors(file_name) if target != file_name]


def file_dependents(graph: nx.MultiDiGraph, file_name: str) -> List[str]:
    """Other files that call into ``file_name``."""
    return [source for source in graph.predecessors(file_name) if source != file_name]


def dependency_cycles(graph: nx.MultiDiGraph) -> List[Tuple[str, ...]]:
    """Cycles between distinct files (self-loops are ignored)."""
    simple = nx.DiGraph()
    simple.add_nodes_from(graph.nodes)
    simple.add_edges_from((u, v) for u, v in graph.edges() if u != v)
    return [tuple(cycle) for cycle in nx.simple_cycles(simple)]
