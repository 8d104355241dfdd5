# projectgen/api/generate.py
import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from projectgen.core.codegen_agent import MissingQueryError, generate_project
from projectgen.core.dep_resolver import suggest_versions
from projectgen.core.errors import DecodeFailure, PipelineIOError, ValidationFailure
from projectgen.core.llm_client import LLMError
from projectgen.models import (
    DecodeErrorResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    IOErrorResponse,
    ValidationErrorResponse,
)
from projectgen.utils.config import NPM_REGISTRY_LOOKUP

logger = logging.getLogger(__name__)

router = APIRouter()

REMEDIATION_HINT = (
    "The generated project is internally inconsistent. Add the listed packages and files "
    "to the project (see suggestedDependencies) or regenerate with a more specific request."
)


def _error(status_code: int, model) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump())


@router.post("", response_model=GenerateResponse)
async def generate(req: GenerateRequest, request: Request):
    state = request.app.state
    try:
        return await generate_project(
            req.model_dump(),
            registry=state.artifacts,
            namespaces=state.namespaces,
            root=state.generated_root,
        )
    except MissingQueryError as e:
        return _error(400, ErrorResponse(error=str(e)))
    except LLMError as e:
        return _error(502, ErrorResponse(error=str(e)))
    except DecodeFailure as e:
        logger.warning("model output could not be decoded: %s", e.reason)
        return _error(500, DecodeErrorResponse(error="AI returned invalid JSON.", reason=e.reason, raw=e.raw))
    except ValidationFailure as e:
        suggestions = await asyncio.to_thread(suggest_versions, e.missing_dependencies, NPM_REGISTRY_LOOKUP)
        return _error(422, ValidationErrorResponse(
            error="Generated project failed dependency validation.",
            issues=e.issues,
            hint=REMEDIATION_HINT,
            suggestedDependencies=suggestions,
        ))
    except PipelineIOError as e:
        logger.error("persisting generated project failed: %s", e)
        return _error(500, IOErrorResponse(error="Failed to write generated project.", path=e.path))
