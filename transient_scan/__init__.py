"""transient-scan: detect transient/persistent clearing collisions in Solidity projects."""

__version__ = "0.1.0"

from .analyzer import ProjectAnalyzer, analyze_project, project_file_views
from .models import AnalysisVerdict, CollisionRecord, FileVerdict, SourceFile
from .verdict import VersionPolicy

__all__ = [
    "__version__",
    "AnalysisVerdict",
    "CollisionRecord",
    "FileVerdict",
    "ProjectAnalyzer",
    "SourceFile",
    "VersionPolicy",
    "analyze_project",
    "project_file_views",
]
