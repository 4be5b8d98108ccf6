"""
Per-file and project-wide metrics.
"""

from typing import List

from .complexity import count_lines
from .entities import FileAnalysis, FileMetrics, MostComplexFile, ProjectMetrics
from .graph import build_file_dependency_graph, most_depended_on


# --- CONFIGURATION ---
HIGH_COMPLEXITY_THRESHOLD = 5


def calculate_file_metrics(source_code: str, analysis: FileAnalysis,
                           threshold: int = HIGH_COMPLEXITY_THRESHOLD) -> FileMetrics:
    """
    Summarize one extracted file.

    Args:
        source_code: Text that was parsed (after fence cleanup)
        analysis: The file's extracted entities
        threshold: Functions scoring strictly above this are "high complexity"

    Returns:
        FileMetrics for the file
    """
    functions = analysis.functions
    total_complexity = sum(f.complexity for f in functions)
    average = total_complexity / len(functions) if functions else 0.0

    return FileMetrics(
        lines_of_code=count_lines(source_code),
        total_functions=len(functions),
        total_variables=len(analysis.variables),
        total_classes=len(analysis.classes),
        total_components=len(analysis.components),
        average_complexity=average,
        high_complexity_functions=sum(1 for f in functions if f.complexity > threshold),
        dependencies=len(analysis.dependencies),
        imports=len(analysis.imports),
    )


def most_complex_file(analyses: List[FileAnalysis]) -> MostComplexFile:
    """Highest summed function complexity; the earlier file keeps a tie."""
    best = MostComplexFile()
    for analysis in analyses:
        complexity = analysis.total_complexity
        if complexity > best.complexity:
            best = MostComplexFile(file_name=analysis.file_name, complexity=complexity)
    return best


def calculate_project_metrics(analyses: List[FileAnalysis],
                              graph=None) -> ProjectMetrics:
    """
    Aggregate resolved per-file results.

    Args:
        analyses: Resolved FileAnalysis list in input order
        graph: File dependency graph (built from ``analyses`` when omitted)

    Returns:
        ProjectMetrics; all zero for an empty list
    """
    if not analyses:
        return ProjectMetrics()

    if graph is None:
        graph = build_file_dependency_graph(analyses)

    total_functions = sum(len(a.functions) for a in analyses)
    total_complexity = sum(a.total_complexity for a in analyses)
    dependencies = [edge for a in analyses for edge in a.dependencies]

    return ProjectMetrics(
        total_files=len(analyses),
        total_lines_of_code=sum(a.file_metrics.lines_of_code for a in analyses),
        total_functions=total_functions,
        total_variables=sum(len(a.variables) for a in analyses),
        total_classes=sum(len(a.classes) for a in analyses),
        total_components=sum(len(a.components) for a in analyses),
        total_imports=sum(len(a.imports) for a in analyses),
        average_complexity=total_complexity / total_functions if total_functions else 0.0,
        high_complexity_functions=sum(a.file_metrics.high_complexity_functions for a in analyses),
        total_dependencies=len(dependencies),
        cross_file_dependencies=sum(1 for edge in dependencies if edge.is_cross_file),
        most_complex_file=most_complex_file(analyses),
        most_depended_on_file=most_depended_on(graph),
    )

