"""Sentinel-delimited chart payloads embedded in model responses."""

from __future__ import annotations

import json
import logging
import re

from .base import ChartDescriptor

logger = logging.getLogger(__name__)

OPEN_MARKER = "VISUALIZATION_DATA_JSON"
CLOSE_MARKER = "END_VISUALIZATION_DATA_JSON"

# The close marker contains the open marker, so the open marker must not be
# preceded by "END_".
_BLOCK_RE = re.compile(r"(?<!END_)VISUALIZATION_DATA_JSON(.*?)END_VISUALIZATION_DATA_JSON", re.DOTALL)
_STRIP_RE = re.compile(r"(?<!END_)VISUALIZATION_DATA_JSON.*?END_VISUALIZATION_DATA_JSON", re.DOTALL)


def extract_chart_blocks(text: str) -> list[ChartDescriptor]:
    """Decode every sentinel block in *text*, in order of appearance.

    Blocks whose payload is not a JSON object are logged and skipped.
    """
    charts: list[ChartDescriptor] = []
    for index, match in enumerate(_BLOCK_RE.finditer(text or "")):
        try:
            payload = json.loads(match.group(1).strip())
        except json.JSONDecodeError as exc:
            logger.warning("Skipping chart block %d: invalid JSON (%s)", index + 1, exc)
            continue
        if not isinstance(payload, dict):
            logger.warning("Skipping chart block %d: expected a JSON object", index + 1)
            continue
        charts.append(ChartDescriptor.from_payload(payload))
    return charts


def strip_chart_blocks(text: str) -> str:
    """Remove every sentinel block, leaving all other content untouched."""
    return _STRIP_RE.sub("", text or "")
