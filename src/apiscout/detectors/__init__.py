"""
Heuristic API-surface detection

- PathDetector - ranks likely API directories and guesses the framework
- EndpointExtractor - finds route declarations with file/line attribution
- summarize - tallies endpoints by method and path prefix
"""

from .path_detector import PathDetector, calculate_confidence
from .endpoint_extractor import EndpointExtractor, extract_endpoints
from .aggregator import summarize, path_prefix

__all__ = [
    'PathDetector',
    'calculate_confidence',
    'EndpointExtractor',
    'extract_endpoints',
    'summarize',
    'path_prefix',
]
