# projectgen/core/decoder.py
"""
File-map decoder.

Model output is untrusted text. Decoding runs in two explicit phases:
  1) strip_wrapping: best-effort removal of prose and code fences around the JSON
  2) parse_file_map: strict structural parse of {"files": {path: content}}
Phase 2 never coerces: a wrong type or unsafe path is a DecodeFailure.
"""
import json
import logging
import re
from typing import Dict

from projectgen.core.errors import DecodeFailure
from projectgen.utils.file_helpers import is_safe_relative_path

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\r?\n(.*?)```", re.DOTALL)


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def strip_wrapping(raw: str) -> str:
    """
    Return the substring most likely to be the JSON object.
    Raises DecodeFailure if there is no '{' at all.
    """
    if not isinstance(raw, str):
        raise DecodeFailure("model output is not text", raw=str(raw))

    text = raw.strip()
    if not text.startswith("{"):
        fence = _FENCE_RE.search(text)
        if fence and _is_json(fence.group(1)):
            text = fence.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise DecodeFailure("no JSON object found in model output", raw=raw)
    return text[start:end + 1]


def parse_file_map(candidate: str, raw: str) -> Dict[str, str]:
    try:
        doc = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise DecodeFailure(f"invalid JSON: {e}", raw=raw) from e

    if not isinstance(doc, dict):
        raise DecodeFailure("top-level JSON value must be an object", raw=raw)
    if "files" not in doc:
        raise DecodeFailure("missing top-level key 'files'", raw=raw)

    files = doc["files"]
    if not isinstance(files, dict):
        raise DecodeFailure("'files' must be an object of path -> content", raw=raw)

    out: Dict[str, str] = {}
    for path, content in files.items():
        if not is_safe_relative_path(path):
            raise DecodeFailure(f"unsafe file path: {path!r}", raw=raw)
        if not isinstance(content, str):
            raise DecodeFailure(f"content for {path!r} must be a string", raw=raw)
        try:
            path.encode("utf-8")
            content.encode("utf-8")
        except UnicodeEncodeError as e:
            raise DecodeFailure(f"{path!r} is not valid UTF-8 text: {e.reason}", raw=raw) from e
        out[path] = content

    extra = [k for k in doc.keys() if k != "files"]
    if extra:
        logger.debug("ignoring extra top-level keys in model output: %s", extra)
    return out


def decode_file_map(raw: str) -> Dict[str, str]:
    """Decode raw model text into a file map or raise DecodeFailure."""
    candidate = strip_wrapping(raw)
    files = parse_file_map(candidate, raw)
    logger.info("decoded %d file(s) from model output", len(files))
    return files
