"""Gemini-backed suggestions for blocks.

The model is asked for JSON; replies that do not parse fall back to a plain
text answer instead of failing the request.
"""
import json
import logging

import requests

from blocklog.core.config import settings
from blocklog.core.errors import UpstreamError, ValidationFailedError

logger = logging.getLogger(__name__)

CATEGORIES = {"technical", "communication", "process", "external_dependency", "resource", "knowledge", "other"}
SEVERITIES = {"low", "medium", "high"}

_decoder = json.JSONDecoder()


def is_available() -> bool:
    return bool(settings.GEMINI_API_KEY)


def status() -> dict:
    if is_available():
        return {"available": True, "message": "AI service is available"}
    return {"available": False, "message": "AI service is not configured. Please set GEMINI_API_KEY."}


def reply_object(text: str) -> dict | None:
    """First JSON object embedded in a model reply.

    Gemini often wraps its answer in a markdown fence or a sentence of
    preamble, so each ``{`` is tried as the start of an object until one
    decodes.
    """
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        return value
    return None


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _generate_text(prompt: str) -> str:
    if not is_available():
        raise ValidationFailedError("AI service is not available")

    body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
    try:
        resp = requests.post(
            f"https://generativelanguage.googleapis.com/v1beta/models/{settings.GEMINI_MODEL}:generateContent",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": settings.GEMINI_API_KEY,
            },
            json=body,
            timeout=60,
        )
    except requests.RequestException as exc:
        logger.error("gemini request failed: %s", exc)
        raise UpstreamError(f"gemini request failed: {exc}") from exc

    if resp.status_code >= 400:
        logger.error("gemini error status=%d", resp.status_code)
        raise UpstreamError(f"gemini error: {resp.text}")

    data = resp.json()
    candidates = data.get("candidates", [])
    if not candidates:
        raise UpstreamError("gemini returned no candidates")

    parts = candidates[0].get("content", {}).get("parts", [])
    text = "".join(part.get("text", "") for part in parts).strip()
    if not text:
        raise UpstreamError("gemini returned empty text")
    return text


def analyze_block(title: str, reason: str, context: str | None = None) -> dict:
    prompt = (
        "You are a productivity expert analyzing a work blocker. Return ONLY JSON.\n"
        f'Title: "{title}"\n'
        f'Reason: "{reason}"\n'
        + (f'Context: "{context}"\n' if context else "")
        + "Output shape:\n"
        "{\n"
        '  "suggestions": ["string"],\n'
        '  "category": "technical" | "communication" | "process" | "external_dependency" | "resource" | "knowledge" | "other",\n'
        '  "severity": "low" | "medium" | "high",\n'
        '  "estimated_duration": "string",\n'
        '  "resources": ["string"],\n'
        '  "next_steps": ["string"]\n'
        "}\n"
        "Severity reflects the impact on productivity. Suggestions must be specific and actionable."
    )
    text = _generate_text(prompt)
    parsed = reply_object(text)
    if parsed is None:
        logger.warning("gemini analysis reply was not JSON; using text fallback")
        return {
            "suggestions": [text],
            "category": "other",
            "severity": "medium",
            "estimated_duration": None,
            "resources": [],
            "next_steps": [],
        }

    category = parsed.get("category")
    severity = parsed.get("severity")
    estimated = parsed.get("estimated_duration") or parsed.get("estimatedDuration")
    return {
        "suggestions": _string_list(parsed.get("suggestions")),
        "category": category if category in CATEGORIES else "other",
        "severity": severity if severity in SEVERITIES else "medium",
        "estimated_duration": str(estimated) if estimated else None,
        "resources": _string_list(parsed.get("resources")),
        "next_steps": _string_list(parsed.get("next_steps") or parsed.get("nextSteps")),
    }


def similar_blocks(title: str, reason: str, past_blocks: list[dict]) -> dict:
    history = "\n".join(
        f'{i}. Title: "{block["title"]}", Reason: "{block["reason"]}"'
        for i, block in enumerate(past_blocks, start=1)
    )
    prompt = (
        "You are analyzing work blockers to find similarities and patterns. Return ONLY JSON.\n"
        f'Current blocker:\nTitle: "{title}"\nReason: "{reason}"\n'
        f"Past blockers:\n{history or '(none)'}\n"
        'Output shape: {"similar_blocks": ["past block title"], "suggestions": ["string"]}\n'
        "Focus on blockers with similar root causes or themes."
    )
    text = _generate_text(prompt)
    parsed = reply_object(text)
    if parsed is None:
        return {"similar_blocks": [], "suggestions": [text]}
    return {
        "similar_blocks": _string_list(parsed.get("similar_blocks") or parsed.get("similarBlocks")),
        "suggestions": _string_list(parsed.get("suggestions")),
    }


def resolution(title: str, reason: str) -> dict:
    prompt = (
        "You are a problem-solving expert. Help resolve this work blocker. Return ONLY JSON.\n"
        f'Title: "{title}"\nReason: "{reason}"\n'
        'Output shape: {"resolution_steps": ["string"], "prevention_tips": ["string"]}\n'
        "Resolution steps are ordered by priority; prevention tips help avoid similar blockers."
    )
    text = _generate_text(prompt)
    parsed = reply_object(text)
    if parsed is None:
        return {"resolution_steps": [text], "prevention_tips": []}
    return {
        "resolution_steps": _string_list(parsed.get("resolution_steps") or parsed.get("resolutionSteps")),
        "prevention_tips": _string_list(parsed.get("prevention_tips") or parsed.get("preventionTips")),
    }
