"""
Core analysis engine for codemap.
"""

from .entities import (
    GLOBAL_SCOPE,
    EntityType,
    DependencyKind,
    SourceLocation,
    FunctionEntity,
    VariableEntity,
    ImportEntity,
    DependencyEdge,
    ClassEntity,
    ComponentEntity,
    FileMetrics,
    FileAnalysis,
    MostComplexFile,
    MostDependedOnFile,
    ProjectMetrics,
    ProjectAnalysisResult,
    SummaryMetrics,
    AnalysisResult,
    SourceFile,
)

from .errors import (
    CodemapError,
    ParseError,
    AnalysisError,
)

from .parser import (
    ParsedSource,
    parse_source,
    clean_markdown_code_blocks,
)

from .complexity import (
    calculate_complexity,
    count_lines,
)

from .extractor import (
    ScopeContext,
    FileExtractor,
    extract_entities,
)

from .resolver import (
    SymbolIndex,
    build_symbol_index,
    resolve_dependencies,
)

from .graph import (
    build_file_dependency_graph,
    most_depended_on,
    dependency_cycles,
)

from .metrics import (
    calculate_file_metrics,
    calculate_project_metrics,
)

from .analyzer import (
    CodeAnalyzer,
    analyze_project,
    analyze_code,
    scan_repository,
)

__all__ = [
    # Entities
    "GLOBAL_SCOPE",
    "EntityType",
    "DependencyKind",
    "SourceLocation",
    "FunctionEntity",
    "VariableEntity",
    "ImportEntity",
    "DependencyEdge",
    "ClassEntity",
    "ComponentEntity",
    "FileMetrics",
    "FileAnalysis",
    "MostComplexFile",
    "MostDependedOnFile",
    "ProjectMetrics",
    "ProjectAnalysisResult",
    "SummaryMetrics",
    "AnalysisResult",
    "SourceFile",
    # Errors
    "CodemapError",
    "ParseError",
    "AnalysisError",
    # Parsing
    "ParsedSource",
    "parse_source",
    "clean_markdown_code_blocks",
    # Complexity
    "calculate_complexity",
    "count_lines",
    # Extraction
    "ScopeContext",
    "FileExtractor",
    "extract_entities",
    # Resolution
    "SymbolIndex",
    "build_symbol_index",
    "resolve_dependencies",
    # Graph
    "build_file_dependency_graph",
    "most_depended_on",
    "dependency_cycles",
    # Metrics
    "calculate_file_metrics",
    "calculate_project_metrics",
    # Analyzer
    "CodeAnalyzer",
    "analyze_project",
    "analyze_code",
    "scan_repository",
]
