# projectgen/core/errors.py
"""
Failure kinds of the generation pipeline.

Each stage raises one of these and never swallows the error of the stage
before it; the HTTP layer maps every kind to its own response shape.
"""
from typing import List, Optional


class PipelineError(Exception):
    """Base class for every pipeline failure."""


class DecodeFailure(PipelineError):
    """The model output could not be turned into a file map."""

    def __init__(self, reason: str, raw: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


class ValidationFailure(PipelineError):
    """The decoded file map is internally inconsistent."""

    def __init__(self, issues: List[str], missing_dependencies: Optional[List[str]] = None) -> None:
        super().__init__(f"{len(issues)} validation issue(s)")
        self.issues = list(issues)
        self.missing_dependencies = list(missing_dependencies or [])


class PipelineIOError(PipelineError):
    """Writing the project directory or the archive failed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class MaterializeError(PipelineIOError):
    pass


class ArchiveBuildError(PipelineIOError):
    pass


class ArtifactNotFound(PipelineError):
    """Unknown, malformed or expired artifact name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"artifact not found: {name}")
        self.name = name
