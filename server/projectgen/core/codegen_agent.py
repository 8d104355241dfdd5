# projectgen/core/codegen_agent.py
"""
Code Generation Agent
- Exposes:
    async def generate_project(payload, registry, namespaces, root) -> Dict[str, Any]
- Runs one request end to end:
    prompt -> model call -> decode -> validate -> materialize + archive -> register
- Every stage failure propagates to the caller as its own exception type
  (DecodeFailure, ValidationFailure, PipelineIOError); nothing is retried here.
"""
import asyncio
import functools
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from projectgen.core.archive import build_archive
from projectgen.core.artifacts import ArtifactRegistry
from projectgen.core.decoder import decode_file_map
from projectgen.core.errors import ValidationFailure
from projectgen.core.llm_client import call_text_generation
from projectgen.core.materializer import materialize
from projectgen.core.namespace import NamespaceFactory
from projectgen.core.prompts import build_generation_prompt
from projectgen.core.validator import validate_file_map
from projectgen.utils.config import PUBLIC_BASE_URL

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Project generated successfully."


class MissingQueryError(ValueError):
    pass


def download_url(zip_name: str, base_url: str = PUBLIC_BASE_URL) -> str:
    return f"{base_url}/download/{zip_name}"


def persist_project(files: Mapping[str, str],
                    namespace: str,
                    root: Union[str, Path],
                    registry: ArtifactRegistry) -> str:
    """
    Materialize the project, build its archive and hand the archive to the
    registry. Runs to completion once started; returns the archive file name.
    """
    materialize(files, namespace, root)
    archive_path = build_archive(files, namespace, root)
    artifact = registry.register(archive_path)
    return artifact.name


def _log_detached_persist(namespace: str, fut: "asyncio.Future[str]") -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        logger.error("persisting %s failed after the request was cancelled: %s", namespace, exc)
    else:
        logger.info("persisted %s after the request was cancelled", namespace)


async def generate_project(payload: Dict[str, Any],
                           registry: ArtifactRegistry,
                           namespaces: NamespaceFactory,
                           root: Union[str, Path],
                           debug: bool = False) -> Dict[str, Any]:
    """
    payload: {query, componentLibrary, projectName, cms}
    Returns the success body; raises on any failure.
    """
    query = (payload.get("query") or "").strip()
    if not query:
        raise MissingQueryError("Query text is required.")

    component_library: Optional[str] = payload.get("componentLibrary")
    project_name: Optional[str] = payload.get("projectName")
    cms: Optional[str] = payload.get("cms")

    prompt = build_generation_prompt(query, component_library=component_library, cms=cms, project_name=project_name)
    raw = await call_text_generation(prompt, debug=debug)

    files = decode_file_map(raw)

    report = validate_file_map(files)
    if not report.ok:
        logger.warning("generated project rejected: %s", report.issues)
        raise ValidationFailure(report.issues, report.missing_dependencies)

    frozen = MappingProxyType(dict(files))
    namespace = namespaces.create(project_name, cms)

    # runs to completion even if the awaiting request is cancelled
    persist = asyncio.ensure_future(asyncio.to_thread(persist_project, frozen, namespace, root, registry))
    try:
        zip_name = await asyncio.shield(persist)
    except asyncio.CancelledError:
        persist.add_done_callback(functools.partial(_log_detached_persist, namespace))
        raise

    return {
        "success": True,
        "files": dict(frozen),
        "message": SUCCESS_MESSAGE,
        "zipFileName": zip_name,
        "downloadUrl": download_url(zip_name),
        "actualProjectName": namespace,
    }
