"""
Normalization of raw model text into FileEdits or Message.

``normalize`` runs an ordered chain of parser strategies; each returns a
result or None, and the last one always succeeds. Nothing here raises on
bad model output.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_LIMIT = 500
ELLIPSIS = "..."
NO_VALID_CHANGES = "No valid file changes were provided by the AI agent."
MESSAGE_FIELDS: Tuple[str, ...] = ("response", "summary", "analysis")

# Non-script fences keep their own extension; everything else is previewed as a React component.
_FENCE_EXTENSIONS: Dict[str, str] = {
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "json": "json",
    "md": "md",
    "markdown": "md",
    "svg": "svg",
    "xml": "xml",
    "yaml": "yaml",
    "yml": "yaml",
}
DEFAULT_FENCE_EXTENSION = "tsx"

_FENCE_RE = re.compile(r"```([\w+#.-]*)[^\n]*\n([\s\S]*?)```")
_WHOLE_JSON_FENCE_RE = re.compile(r"^```\s*(?:json)?\s*\n([\s\S]*?)\n?```$", re.IGNORECASE)


@dataclass(frozen=True)
class NormalizedResult:
    """Fields shared by both result shapes."""

    response: Optional[str] = None
    summary: Optional[str] = None
    analysis: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None

    @property
    def message_text(self) -> Optional[str]:
        return self.response or self.summary or self.analysis


@dataclass(frozen=True)
class FileEdits(NormalizedResult):
    """Complete replacement contents keyed by file path."""

    files: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Message(NormalizedResult):
    """Plain user-facing text with no file changes."""

    text: str = ""


ParserStrategy = Callable[[str, Optional[Dict[str, Any]], int], Optional[NormalizedResult]]


def truncate_for_display(text: str, limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def _parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Strict parse; a response made of a single ```json fence is unwrapped first."""
    stripped = text.strip()
    candidates = [stripped]
    fenced = _WHOLE_JSON_FENCE_RE.match(stripped)
    if fenced:
        candidates.append(fenced.group(1))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (ValueError, RecursionError):
            # Malformed or deeply nested output is plain text.
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def _text_fields(doc: Dict[str, Any]) -> Dict[str, Optional[str]]:
    out: Dict[str, Optional[str]] = {}
    for key in MESSAGE_FIELDS:
        value = doc.get(key)
        out[key] = value if isinstance(value, str) and value.strip() else None
    return out


def _clean_files(pairs: Iterable[Tuple[Any, Any]]) -> Dict[str, str]:
    kept: Dict[str, str] = {}
    dropped: List[str] = []
    for path, content in pairs:
        if not isinstance(path, str) or not path.strip():
            dropped.append(repr(path))
            continue
        if not isinstance(content, str) or not content.strip():
            dropped.append(path)
            continue
        kept[path.strip()] = content
    if dropped:
        logger.warning("Dropped %d invalid file entries from model output: %s", len(dropped), dropped)
    return kept


def _edits_or_empty(files: Dict[str, str], doc: Dict[str, Any]) -> NormalizedResult:
    fields = _text_fields(doc)
    if files:
        return FileEdits(files=files, payload=doc, **fields)
    text = fields["response"] or fields["summary"] or fields["analysis"] or NO_VALID_CHANGES
    return Message(text=text, payload=doc, **fields)


def parse_files_mapping(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    if doc is None or not isinstance(doc.get("files"), dict):
        return None
    files = _clean_files(doc["files"].items())
    if not files and isinstance(doc.get("codeChanges"), list):
        return None
    return _edits_or_empty(files, doc)


def parse_code_changes(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    """Legacy ``codeChanges: [{file, content}]`` shape."""
    if doc is None or not isinstance(doc.get("codeChanges"), list):
        return None
    pairs = [
        (change.get("file"), change.get("content"))
        for change in doc["codeChanges"]
        if isinstance(change, dict)
    ]
    return _edits_or_empty(_clean_files(pairs), doc)


def parse_message_fields(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    if doc is None:
        return None
    fields = _text_fields(doc)
    message = fields["response"] or fields["analysis"] or fields["summary"]
    if message is None:
        return None
    return Message(text=message, payload=doc, **fields)


def parse_other_object(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    # Plans, analyses and other caller-specific schemas ride along in ``payload``.
    if doc is None:
        return None
    return Message(text=truncate_for_display(text.strip(), limit), payload=doc)


def _fence_extension(language: str) -> str:
    return _FENCE_EXTENSIONS.get(language.strip().lower(), DEFAULT_FENCE_EXTENSION)


def parse_fenced_blocks(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    if doc is not None:
        return None
    files: Dict[str, str] = {}
    for language, body in _FENCE_RE.findall(text):
        content = body.strip("\r\n")
        if not content.strip():
            continue
        name = f"generated-file-{len(files) + 1}.{_fence_extension(language)}"
        files[name] = content
    if not files:
        return None
    logger.info("Recovered %d fenced code block(s) from non-JSON model output", len(files))
    return FileEdits(files=files)


def parse_raw_text(text: str, doc: Optional[Dict[str, Any]], limit: int) -> Optional[NormalizedResult]:
    return Message(text=truncate_for_display(text, limit))


PARSER_CHAIN: Sequence[ParserStrategy] = (
    parse_files_mapping,
    parse_code_changes,
    parse_message_fields,
    parse_other_object,
    parse_fenced_blocks,
    parse_raw_text,
)


def normalize(text: str, *, display_limit: int = DEFAULT_DISPLAY_LIMIT) -> NormalizedResult:
    """Turn model output into FileEdits or Message; always returns a result."""
    text = text if isinstance(text, str) else ""
    doc = _parse_json_object(text)
    if doc is None:
        logger.debug("Model output is not a JSON object (first 200 chars): %s", text[:200])
    for strategy in PARSER_CHAIN:
        result = strategy(text, doc, display_limit)
        if result is not None:
            return result
    return parse_raw_text(text, doc, display_limit)
