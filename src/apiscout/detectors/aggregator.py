"""Endpoint tallies for the analysis summary."""

from collections import Counter
from typing import Iterable

from ..schemas import AnalysisSummary, Endpoint


def path_prefix(route_path: str) -> str:
    """'/users/:id' -> 'users'; '/' or '' -> 'root'"""
    parts = route_path.split('/')
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return 'root'


def summarize(endpoints: Iterable[Endpoint]) -> AnalysisSummary:
    by_method: Counter = Counter()
    by_path: Counter = Counter()
    total = 0
    for endpoint in endpoints:
        total += 1
        by_method[endpoint.method] += 1
        by_path[path_prefix(endpoint.route_path)] += 1

    return AnalysisSummary(
        total_endpoints=total,
        by_method=dict(by_method),
        by_path=dict(by_path),
    )


__all__ = ['summarize', 'path_prefix']
