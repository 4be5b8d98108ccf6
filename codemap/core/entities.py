"""
Entity models for JavaScript/TypeScript code analysis.

This module defines the dataclasses produced by one analysis run:
functions, variables, imports, classes, UI components, dependency
edges, and the per-file / project-wide metric summaries that wrap them.

All entities are frozen. A run builds them once and hands out the
finished object graph; a later run never mutates an earlier result.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum


GLOBAL_SCOPE = "global"


class EntityType(Enum):
    """Types of code entities we can extract."""
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    VARIABLE = "variable"
    IMPORT = "import"
    COMPONENT = "component"


class DependencyKind(Enum):
    """How a dependency edge was observed in the source."""
    CALL = "call"                # foo()
    METHOD_CALL = "method_call"  # obj.foo()
    JSX = "jsx"                  # <Foo />


@dataclass(frozen=True)
class SourceLocation:
    """Span of a node. Lines are 1-indexed, columns 0-indexed."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def from_node(cls, node) -> "SourceLocation":
        return cls(
            start_line=node.start_point[0] + 1,
            start_column=node.start_point[1],
            end_line=node.end_point[0] + 1,
            end_column=node.end_point[1],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": {"line": self.start_line, "column": self.start_column},
            "end": {"line": self.end_line, "column": self.end_column},
        }


@dataclass(frozen=True)
class FunctionEntity:
    """
    A named function, arrow function or class method.

    Methods are name-qualified as ``ClassName.methodName``.
    """
    name: str
    file_name: str
    params: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None
    complexity: int = 1
    is_async: bool = False
    kind: str = "function"          # "function", "arrow", "method"
    return_type: Optional[str] = None

    @property
    def unique_id(self) -> str:
        return f"{self.file_name}:{self.name}"

    @property
    def signature(self) -> str:
        prefix = "async " if self.is_async else ""
        ret = f": {self.return_type}" if self.return_type else ""
        return f"{prefix}{self.name}({', '.join(self.params)}){ret}"

    @property
    def entity_type(self) -> EntityType:
        return EntityType.METHOD if self.kind == "method" else EntityType.FUNCTION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.entity_type.value,
            "name": self.name,
            "unique_id": self.unique_id,
            "file": self.file_name,
            "params": list(self.params),
            "signature": self.signature,
            "location": self.location.to_dict() if self.location else None,
            "complexity": self.complexity,
            "is_async": self.is_async,
            "kind": self.kind,
            "return_type": self.return_type,
        }


@dataclass(frozen=True)
class VariableEntity:
    """A variable declarator or class property."""
    name: str
    file_name: str
    kind: str = "var"               # "const", "let", "var", "property"
    location: Optional[SourceLocation] = None
    is_state: bool = False
    type: Optional[str] = None

    @property
    def unique_id(self) -> str:
        return f"{self.file_name}:{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": EntityType.VARIABLE.value,
            "name": self.name,
            "unique_id": self.unique_id,
            "file": self.file_name,
            "kind": self.kind,
            "location": self.location.to_dict() if self.location else None,
            "is_state": self.is_state,
            "type_annotation": self.type,
        }


@dataclass(frozen=True)
class ImportEntity:
    """
    One imported binding.

    ``import React, { useState as useS } from "react"`` yields two
    entities, ``React`` and ``useS``, both with source ``react``.
    """
    name: str
    source: str
    file_name: str
    location: Optional[SourceLocation] = None
    is_local: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": EntityType.IMPORT.value,
            "name": self.name,
            "source": self.source,
            "file": self.file_name,
            "location": self.location.to_dict() if self.location else None,
            "is_local": self.is_local,
        }


@dataclass(frozen=True)
class DependencyEdge:
    """
    A call or reference from a caller scope to a named callee.

    ``callee_file`` starts out equal to ``caller_file`` and is only
    rewritten by the cross-file resolver when the callee name is
    declared in a different file.
    """
    caller: str
    callee: str
    caller_file: str
    callee_file: str
    location: Optional[SourceLocation] = None
    is_cross_file: bool = False
    kind: DependencyKind = DependencyKind.CALL

    @property
    def file_name(self) -> str:
        return self.caller_file

    def to_dict(self) -> Dict[str, Any]:
        return {
            "caller": self.caller,
            "callee": self.callee,
            "file": self.caller_file,
            "caller_file": self.caller_file,
            "callee_file": self.callee_file,
            "location": self.location.to_dict() if self.location else None,
            "is_cross_file": self.is_cross_file,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class ClassEntity:
    """A class declaration with its qualified methods and properties."""
    name: str
    file_name: str
    location: Optional[SourceLocation] = None
    super_class: Optional[str] = None
    methods: Tuple[FunctionEntity, ...] = ()
    properties: Tuple[VariableEntity, ...] = ()

    @property
    def unique_id(self) -> str:
        return f"{self.file_name}:{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": EntityType.CLASS.value,
            "name": self.name,
            "unique_id": self.unique_id,
            "file": self.file_name,
            "location": self.location.to_dict() if self.location else None,
            "super_class": self.super_class,
            "methods": [m.to_dict() for m in self.methods],
            "properties": [p.to_dict() for p in self.properties],
        }


@dataclass(frozen=True)
class ComponentEntity:
    """
    A UI component (function, arrow function or class).

    ``effect_dependencies`` holds one snapshot per effect call that was
    given an array literal as its dependency list.
    """
    name: str
    file_name: str
    location: Optional[SourceLocation] = None
    props: Tuple[str, ...] = ()
    hooks: Tuple[str, ...] = ()
    state_variables: Tuple[VariableEntity, ...] = ()
    effect_dependencies: Tuple[Tuple[str, ...], ...] = ()
    is_class: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": EntityType.COMPONENT.value,
            "name": self.name,
            "file": self.file_name,
            "location": self.location.to_dict() if self.location else None,
            "props": list(self.props),
            "hooks": list(self.hooks),
            "state_variables": [v.to_dict() for v in self.state_variables],
            "effect_dependencies": [list(deps) for deps in self.effect_dependencies],
            "is_class": self.is_class,
        }


@dataclass(frozen=True)
class FileMetrics:
    """Per-file summary numbers."""
    lines_of_code: int = 0
    total_functions: int = 0
    total_variables: int = 0
    total_classes: int = 0
    total_components: int = 0
    average_complexity: float = 0.0
    high_complexity_functions: int = 0
    dependencies: int = 0
    imports: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lines_of_code": self.lines_of_code,
            "total_functions": self.total_functions,
            "total_variables": self.total_variables,
            "total_classes": self.total_classes,
            "total_components": self.total_components,
            "average_complexity": self.average_complexity,
            "high_complexity_functions": self.high_complexity_functions,
            "dependencies": self.dependencies,
            "imports": self.imports,
        }


@dataclass(frozen=True)
class FileAnalysis:
    """
    Complete analysis of one source file.

    A file that failed to parse keeps its ``file_name``, has every entity
    list empty, zeroed metrics, and the failure message in ``error``.
    """
    file_name: str
    functions: Tuple[FunctionEntity, ...] = ()
    variables: Tuple[VariableEntity, ...] = ()
    imports: Tuple[ImportEntity, ...] = ()
    dependencies: Tuple[DependencyEdge, ...] = ()
    classes: Tuple[ClassEntity, ...] = ()
    components: Tuple[ComponentEntity, ...] = ()
    file_metrics: FileMetrics = field(default_factory=FileMetrics)
    error: Optional[str] = None

    @property
    def parse_success(self) -> bool:
        return self.error is None

    @property
    def total_complexity(self) -> int:
        return sum(f.complexity for f in self.functions)

    @classmethod
    def failed(cls, file_name: str, error: str) -> "FileAnalysis":
        return cls(file_name=file_name, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "functions": [f.to_dict() for f in self.functions],
            "variables": [v.to_dict() for v in self.variables],
            "imports": [i.to_dict() for i in self.imports],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "classes": [c.to_dict() for c in self.classes],
            "components": [c.to_dict() for c in self.components],
            "file_metrics": self.file_metrics.to_dict(),
            "error": self.error,
        }


@dataclass(frozen=True)
class MostComplexFile:
    file_name: str = ""
    complexity: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"file_name": self.file_name, "complexity": self.complexity}


@dataclass(frozen=True)
class MostDependedOnFile:
    file_name: str = ""
    dependencies: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"file_name": self.file_name, "dependencies": self.dependencies}


@dataclass(frozen=True)
class ProjectMetrics:
    """Aggregates across every FileAnalysis of one run."""
    total_files: int = 0
    total_lines_of_code: int = 0
    total_functions: int = 0
    total_variables: int = 0
    total_classes: int = 0
    total_components: int = 0
    total_imports: int = 0
    average_complexity: float = 0.0
    high_complexity_functions: int = 0
    total_dependencies: int = 0
    cross_file_dependencies: int = 0
    most_complex_file: MostComplexFile = field(default_factory=MostComplexFile)
    most_depended_on_file: MostDependedOnFile = field(default_factory=MostDependedOnFile)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_files": self.total_files,
            "total_lines_of_code": self.total_lines_of_code,
            "total_functions": self.total_functions,
            "total_variables": self.total_variables,
            "total_classes": self.total_classes,
            "total_components": self.total_components,
            "total_imports": self.total_imports,
            "average_complexity": self.average_complexity,
            "high_complexity_functions": self.high_complexity_functions,
            "total_dependencies": self.total_dependencies,
            "cross_file_dependencies": self.cross_file_dependencies,
            "most_complex_file": self.most_complex_file.to_dict(),
            "most_depended_on_file": self.most_depended_on_file.to_dict(),
        }


@dataclass(frozen=True)
class ProjectAnalysisResult:
    """
    Full output of analyzing a batch of files.

    ``error`` is only set when the run failed as a whole; every other
    field is then empty or zeroed.
    """
    files: Tuple[FileAnalysis, ...] = ()
    functions: Tuple[FunctionEntity, ...] = ()
    variables: Tuple[VariableEntity, ...] = ()
    imports: Tuple[ImportEntity, ...] = ()
    dependencies: Tuple[DependencyEdge, ...] = ()
    classes: Tuple[ClassEntity, ...] = ()
    components: Tuple[ComponentEntity, ...] = ()
    project_metrics: ProjectMetrics = field(default_factory=ProjectMetrics)
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "ProjectAnalysisResult":
        return cls(error=error)

    def get_file(self, file_name: str) -> Optional[FileAnalysis]:
        for analysis in self.files:
            if analysis.file_name == file_name:
                return analysis
        return None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "files": [f.to_dict() for f in self.files],
            "functions": [f.to_dict() for f in self.functions],
            "variables": [v.to_dict() for v in self.variables],
            "imports": [i.to_dict() for i in self.imports],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "classes": [c.to_dict() for c in self.classes],
            "components": [c.to_dict() for c in self.components],
            "project_metrics": self.project_metrics.to_dict(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class SummaryMetrics:
    """Metric subset reported by the single-file entry point."""
    total_functions: int = 0
    total_variables: int = 0
    average_complexity: float = 0.0
    high_complexity_functions: int = 0
    dependencies: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_functions": self.total_functions,
            "total_variables": self.total_variables,
            "average_complexity": self.average_complexity,
            "high_complexity_functions": self.high_complexity_functions,
            "dependencies": self.dependencies,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Single-file result shape for callers that only ever had one file."""
    functions: Tuple[FunctionEntity, ...] = ()
    variables: Tuple[VariableEntity, ...] = ()
    imports: Tuple[ImportEntity, ...] = ()
    dependencies: Tuple[DependencyEdge, ...] = ()
    metrics: SummaryMetrics = field(default_factory=SummaryMetrics)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "functions": [f.to_dict() for f in self.functions],
            "variables": [v.to_dict() for v in self.variables],
            "imports": [i.to_dict() for i in self.imports],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "metrics": self.metrics.to_dict(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class SourceFile:
    """One (file name, source text) input pair."""
    name: str
    content: str


def flatten(analyses: List[FileAnalysis], attr: str) -> Tuple[Any, ...]:
    """Concatenate one entity list across file analyses, in input order."""
    items: List[Any] = []
    for analysis in analyses:
        items.extend(getattr(analysis, attr))
    return tuple(items)
