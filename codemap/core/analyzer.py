"""
Project analysis entry points.

    analyze_project(files) -> ProjectAnalysisResult
    analyze_code(code)     -> AnalysisResult   (single file, "input.js")

Pipeline per call: parse + extract each file (isolated, optionally on a
thread pool), resolve cross-file edges once every file is done, then
aggregate metrics. Nothing is kept on the analyzer between calls, so
each call is an independent, repeatable computation over its input.
"""

import argparse
import json
import logging
import os
import sys
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Iterable, List, Optional

from ..config import AnalyzerConfig, configure_logging
from .entities import (
    AnalysisResult,
    FileAnalysis,
    ProjectAnalysisResult,
    SourceFile,
    SummaryMetrics,
    flatten,
)
from .errors import AnalysisError, ParseError
from .extractor import FileExtractor
from .graph import build_file_dependency_graph
from .metrics import calculate_file_metrics, calculate_project_metrics
from .parser import SOURCE_EXTENSIONS, parse_source
from .resolver import build_symbol_index, resolve_dependencies

logger = logging.getLogger(__name__)


# --- CONFIGURATION ---
SINGLE_FILE_NAME = "input.js"
SKIP_DIRECTORIES = {"node_modules", ".git", "dist", "build"}


def to_source_file(entry: Any) -> SourceFile:
    """
    Accept a SourceFile, a (name, content) pair, or a mapping with
    ``name`` and ``content`` keys.

    Raises:
        AnalysisError: if the entry has no usable name or content
    """
    if isinstance(entry, SourceFile):
        source = entry
    elif isinstance(entry, Mapping):
        source = SourceFile(name=entry.get("name"), content=entry.get("content"))
    elif isinstance(entry, (tuple, list)) and len(entry) == 2:
        source = SourceFile(name=entry[0], content=entry[1])
    else:
        raise AnalysisError(f"Unsupported file entry: {type(entry).__name__}")

    if not isinstance(source.name, str) or not source.name:
        raise AnalysisError("File entry is missing a name")
    if source.content is None:
        source = replace(source, content="")
    if not isinstance(source.content, str):
        raise AnalysisError(f"Content of {source.name} must be text")
    return source


class CodeAnalyzer:
    """
    Analyzes batches of JavaScript/TypeScript sources.

    The analyzer only holds configuration; all intermediate results
    live inside a single call.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig.from_env()

    def analyze_file(self, source: SourceFile) -> FileAnalysis:
        """
        Parse and extract one file.

        Failures stay inside this boundary: the file comes back empty
        with zeroed metrics and the message in ``error``, and the other
        files of the batch are unaffected.
        """
        try:
            parsed = parse_source(source.name, source.content, self.config.max_source_bytes)
            analysis = FileExtractor(source.name, self.config).extract(parsed)
            metrics = calculate_file_metrics(
                parsed.source, analysis, self.config.high_complexity_threshold
            )
        except ParseError as e:
            logger.warning("Skipping %s: %s", source.name, e)
            return FileAnalysis.failed(source.name, str(e))
        except Exception as e:
            logger.exception("Failed to analyze %s", source.name)
            return FileAnalysis.failed(source.name, f"Failed to analyze {source.name}: {e}")

        logger.debug("Analyzed %s (%s grammar)", source.name, parsed.grammar)
        return replace(analysis, file_metrics=metrics)

    def _extract_all(self, sources: List[SourceFile]) -> List[FileAnalysis]:
        workers = self.config.max_workers
        if workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                return list(pool.map(self.analyze_file, sources))
        return [self.analyze_file(source) for source in sources]

    def analyze_project(self, files: Iterable[Any]) -> ProjectAnalysisResult:
        """
        Analyze an ordered batch of files.

        Args:
            files: SourceFile values, (name, content) pairs or
                {"name", "content"} mappings, in input order

        Returns:
            ProjectAnalysisResult. On an unexpected failure every
            collection is empty and ``error`` holds the message.
        """
        try:
            sources = [to_source_file(entry) for entry in files]
            logger.info("Analyzing %d file(s)", len(sources))

            extracted = self._extract_all(sources)

            index = build_symbol_index(extracted)
            analyses = resolve_dependencies(extracted, index)

            graph = build_file_dependency_graph(analyses)
            project_metrics = calculate_project_metrics(analyses, graph)

            failed = sum(1 for a in analyses if not a.parse_success)
            if failed:
                logger.info("%d of %d file(s) could not be parsed", failed, len(analyses))

            return ProjectAnalysisResult(
                files=tuple(analyses),
                functions=flatten(analyses, "functions"),
                variables=flatten(analyses, "variables"),
                imports=flatten(analyses, "imports"),
                dependencies=flatten(analyses, "dependencies"),
                classes=flatten(analyses, "classes"),
                components=flatten(analyses, "components"),
                project_metrics=project_metrics,
            )
        except Exception as e:
            logger.exception("Project analysis failed")
            return ProjectAnalysisResult.failed(f"Analysis failed: {e}")

    def analyze_code(self, code: str) -> AnalysisResult:
        """
        Single-file entry point.

        The code is analyzed as ``input.js`` and reported in the flat
        shape older callers expect.
        """
        result = self.analyze_project([SourceFile(name=SINGLE_FILE_NAME, content=code)])
        if result.error is not None:
            return AnalysisResult(error=result.error)

        analysis = result.files[0]
        file_metrics = analysis.file_metrics
        return AnalysisResult(
            functions=analysis.functions,
            variables=analysis.variables,
            imports=analysis.imports,
            dependencies=analysis.dependencies,
            metrics=SummaryMetrics(
                total_functions=file_metrics.total_functions,
                total_variables=file_metrics.total_variables,
                average_complexity=file_metrics.average_complexity,
                high_complexity_functions=file_metrics.high_complexity_functions,
                dependencies=file_metrics.dependencies,
            ),
            error=analysis.error,
        )


# --- MODULE-LEVEL API ---
_default_analyzer: Optional[CodeAnalyzer] = None


def get_default_analyzer() -> CodeAnalyzer:
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = CodeAnalyzer()
    return _default_analyzer


def analyze_project(files: Iterable[Any]) -> ProjectAnalysisResult:
    return get_default_analyzer().analyze_project(files)


def analyze_code(code: str) -> AnalysisResult:
    return get_default_analyzer().analyze_code(code)


def scan_repository(path: str) -> List[SourceFile]:
    """
    Collect JavaScript/TypeScript sources under a directory.

    Args:
        path: Path to the repository root

    Returns:
        SourceFile list with '/'-separated paths relative to ``path``,
        in sorted order
    """
    sources: List[SourceFile] = []
    for root, dirs, files in os.walk(path):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRECTORIES)
        for file in sorted(files):
            if not file.endswith(SOURCE_EXTENSIONS):
                continue
            full_path = os.path.join(root, file)
            rel_path = os.path.relpath(full_path, path).replace(os.sep, "/")
            try:
                with open(full_path, "r", encoding="utf8") as f:
                    content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read %s: %s", rel_path, e)
                continue
            sources.append(SourceFile(name=rel_path, content=content))

    logger.info("Found %d source file(s) in %s", len(sources), path)
    return sources


# --- MAIN EXECUTION ---
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="codemap",
        description="Analyze a JavaScript/TypeScript repository.",
    )
    parser.add_argument("path", help="Repository root to scan")
    parser.add_argument("-o", "--output", default="analysis.json", help="JSON output file")
    args = parser.parse_args(argv)

    config = AnalyzerConfig.from_env()
    configure_logging(config)

    if not os.path.isdir(args.path):
        logger.error("The folder '%s' does not exist.", args.path)
        return 1

    result = CodeAnalyzer(config).analyze_project(scan_repository(args.path))

    with open(args.output, "w", encoding="utf8") as f:
        json.dump(result.to_dict(), f, indent=2)

    if result.error:
        logger.error(result.error)
        return 1

    metrics = result.project_metrics
    print(f"[OK] Analyzed {metrics.total_files} files -> {args.output}")
    print(f"   Functions: {metrics.total_functions}")
    print(f"   Components: {metrics.total_components}")
    print(f"   Cross-file dependencies: {metrics.cross_file_dependencies}")
    print(f"   Most complex file: {metrics.most_complex_file.file_name or '-'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
