"""Merging of per-entry analysis results."""

from typing import Dict, List

from .exceptions import EmptyMergeError
from .models import AnalysisResult, DependencyGraph, MergedResult, Statistics


class ResultMerger:
    """Combine independent per-entry analyses of one project."""

    @staticmethod
    def merge_statistics(results: List[AnalysisResult]) -> Statistics:
        """Sum every statistic field.

        Each entry is traced on its own, so a file reached from two entries
        is counted twice.
        """
        merged = Statistics()
        for result in results:
            merged.total_files += result.statistics.total_files
            merged.total_dependencies += result.statistics.total_dependencies
            for file_type, count in result.statistics.files_by_type.items():
                merged.files_by_type[file_type] = merged.files_by_type.get(file_type, 0) + count
        return merged

    @staticmethod
    def merge_graphs(results: List[AnalysisResult]) -> DependencyGraph:
        """Union the graphs, dropping duplicate dependencies per key."""
        merged: Dict[str, List[str]] = {}
        for result in results:
            for file, dependencies in result.dependency_graph.items():
                existing = merged.setdefault(file, [])
                seen = set(existing)
                for dep in dependencies:
                    if dep not in seen:
                        existing.append(dep)
                        seen.add(dep)
        return merged

    @staticmethod
    def merge(results: List[AnalysisResult]) -> MergedResult:
        if not results:
            raise EmptyMergeError("No analysis results to merge")

        return MergedResult(
            entry_file=", ".join(r.entry_file for r in results),
            dependency_graph=ResultMerger.merge_graphs(results),
            # Entries share one project, so the first tree stands for all
            directory_tree=results[0].directory_tree,
            statistics=ResultMerger.merge_statistics(results),
            entry_results=list(results),
        )


def merge_results(results: List[AnalysisResult]) -> MergedResult:
    return ResultMerger.merge(results)
