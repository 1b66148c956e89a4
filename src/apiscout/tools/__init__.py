"""
Utility tools for importing and walking projects
"""

from .filesystem_utils import FilesystemUtils, CommandResult, relative_path
from .github import GitHubCloner, RepoLocator, parse_github_url
from .materializer import ProjectMaterializer

__all__ = [
    'FilesystemUtils',
    'CommandResult',
    'relative_path',
    'GitHubCloner',
    'RepoLocator',
    'parse_github_url',
    'ProjectMaterializer',
]
