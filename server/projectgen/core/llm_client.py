# projectgen/core/llm_client.py
import asyncio
import json
import logging
import os
import time
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from projectgen.utils.config import GEMINI_MODEL, LLM_RETRIES, LLM_TEMPERATURE, LOG_DIR, TIMEOUT

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The model call failed after all attempts."""


# -------------------------
# LLM init + raw text call
# -------------------------
def get_llm(timeout: int = TIMEOUT):
    api_key = os.getenv("GOOGLE_API_KEY_GEMINI") or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise LLMError("Please set GOOGLE_API_KEY_GEMINI environment variable for Gemini access.")
    return ChatGoogleGenerativeAI(
        model=GEMINI_MODEL,
        temperature=LLM_TEMPERATURE,
        google_api_key=api_key,
        timeout=timeout,
    )


def _save_debug_log(prefix: str, payload: Dict[str, Any]) -> None:
    fname = f"{int(time.time())}_{prefix}.json"
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        with open(os.path.join(LOG_DIR, fname), "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
    except OSError:
        logger.exception("Failed to write debug log")


def _message_text(message: Any) -> str:
    """AIMessage.content may be a string or a list of content parts."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


async def call_text_generation(prompt: str,
                               max_retries: int = LLM_RETRIES,
                               timeout: int = TIMEOUT,
                               debug: bool = False,
                               llm: Optional[Any] = None) -> str:
    """
    Send the prompt and return the raw, unparsed text of the reply.
    Transport failures are retried here; the reply itself is never judged.
    """
    llm = llm or get_llm(timeout=timeout)

    last_exc: Optional[Exception] = None
    total_attempts = 1 + max_retries
    for attempt in range(1, total_attempts + 1):
        start_ts = time.time()
        try:
            result = await llm.ainvoke([HumanMessage(content=prompt)])
            text = _message_text(result).strip()
            logger.info("LLM attempt %d succeeded in %.1fs (%d chars)", attempt, time.time() - start_ts, len(text))
            if debug:
                _save_debug_log(f"llm_attempt_{attempt}", {"prompt": prompt, "raw_result": text})
            return text
        except Exception as e:
            last_exc = e
            logger.exception("LLM attempt %d failed: %s", attempt, e)
            _save_debug_log(f"llm_error_attempt_{attempt}", {"prompt": prompt, "error": repr(e)})
            if attempt < total_attempts:
                await asyncio.sleep(1 * attempt)

    raise LLMError(f"LLM generation failed after {total_attempts} attempts. Last error: {last_exc}")
