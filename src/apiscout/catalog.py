"""
Static detection catalogs.

Everything the detectors match against lives here as data: conventional API
directory names, confidence rules, framework signatures and route-call
patterns. Adding a convention means adding a row, not touching control flow.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

from .schemas import PathKind


# Source extensions scanned by the detectors
SOURCE_EXTENSIONS: Tuple[str, ...] = ('.js', '.ts', '.jsx', '.tsx')

# Directory names never descended into, at any depth
EXCLUDED_DIRS = frozenset({'node_modules', '.git', 'dist', 'build', 'coverage'})

# Substring -> kind, checked in this order; first hit wins
KIND_PRIORITY: Tuple[Tuple[str, PathKind], ...] = (
    ('api', PathKind.API),
    ('routes', PathKind.ROUTES),
    ('controllers', PathKind.CONTROLLERS),
    ('handlers', PathKind.HANDLERS),
    ('endpoints', PathKind.ENDPOINTS),
)
DEFAULT_KIND = PathKind.API

BASE_CONFIDENCE = 0.5
FALLBACK_CONFIDENCE = 0.5
MAX_CONFIDENCE = 1.0

# Bonus when the catalog entry contains the substring
NAME_BONUSES: Tuple[Tuple[str, float], ...] = (
    ('api', 0.2),
    ('routes', 0.15),
)

# Bonus when the catalog entry starts with the prefix
PREFIX_BONUSES: Tuple[Tuple[str, float], ...] = (
    ('src/', 0.1),
)

# Cumulative bonus for each threshold the file count exceeds
FILE_COUNT_TIERS: Tuple[Tuple[int, float], ...] = (
    (10, 0.1),
    (20, 0.1),
)

FRAMEWORK_PROBE_LIMIT = 5
FALLBACK_FILE_LIMIT = 50


def categorize_path_type(pattern: str) -> PathKind:
    for needle, kind in KIND_PRIORITY:
        if needle in pattern:
            return kind
    return DEFAULT_KIND


def name_bonus(pattern: str) -> float:
    bonus = 0.0
    for needle, weight in NAME_BONUSES:
        if needle in pattern:
            bonus += weight
    for prefix, weight in PREFIX_BONUSES:
        if pattern.startswith(prefix):
            bonus += weight
    return bonus


@dataclass(frozen=True)
class PathPattern:
    """One conventional API directory, relative to the project root"""
    pattern: str
    kind: PathKind
    bonus: float

    @classmethod
    def from_pattern(cls, pattern: str) -> "PathPattern":
        return cls(pattern=pattern, kind=categorize_path_type(pattern), bonus=name_bonus(pattern))


# Order only affects discovery order among equal confidences
API_PATH_PATTERNS: List[str] = [
    'src/api',
    'src/routes',
    'api',
    'routes',
    'src/controllers',
    'controllers',
    'src/handlers',
    'handlers',
    'src/endpoints',
    'endpoints',
    'server/api',
    'server/routes',
    'backend/api',
    'backend/routes',
]

API_PATH_CATALOG: Tuple[PathPattern, ...] = tuple(PathPattern.from_pattern(p) for p in API_PATH_PATTERNS)


# Checked in insertion order; the first framework whose signature appears wins
FRAMEWORK_SIGNATURES: Dict[str, Pattern[str]] = {
    'express': re.compile(r"""express\(\)|require\(['"]express['"]\)|from ['"]express['"]"""),
    'fastify': re.compile(r"""fastify\(\)|require\(['"]fastify['"]\)|from ['"]fastify['"]"""),
    'koa': re.compile(r"""new Koa\(\)|require\(['"]koa['"]\)|from ['"]koa['"]"""),
}


def _route_call(method: str) -> Pattern[str]:
    return re.compile(r"\." + method + r"""\s*\(['"`]([^'"`]+)['"`]""")


# `.get('/path'`, `.post("/path"` ... ; group 1 is the literal route
HTTP_METHOD_PATTERNS: Dict[str, Pattern[str]] = {
    method.upper(): _route_call(method)
    for method in ('get', 'post', 'put', 'delete', 'patch', 'options')
}

SUPPORTED_FRAMEWORKS = ['Express.js', 'Fastify', 'Koa', 'NestJS', 'Hapi']


__all__ = [
    'SOURCE_EXTENSIONS',
    'EXCLUDED_DIRS',
    'PathPattern',
    'API_PATH_CATALOG',
    'FRAMEWORK_SIGNATURES',
    'HTTP_METHOD_PATTERNS',
    'categorize_path_type',
    'name_bonus',
]
