"""Output format selection and rendering of pgcmd results."""

from __future__ import annotations

import json
import sys
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import BaseModel


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


def format_text(model: BaseModel) -> list[str]:
    """One "name: value" line per field, lists expanded one item per line."""
    data = model.model_dump()
    width = max((len(k) for k in data), default=0)
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, list):
            lines.append(f"{key}:")
            lines.extend(f"  {item}" for item in value)
        else:
            lines.append(f"{key.ljust(width)}  {value}")
    return lines


def format_json(model: BaseModel) -> list[str]:
    return [json.dumps(model.model_dump(mode="json"), indent=2)]


def write_output(model: BaseModel, format: OutputFormat = OutputFormat.TEXT) -> None:
    """Write formatted output to stdout."""
    if format == OutputFormat.JSON:
        lines = format_json(model)
    else:
        lines = format_text(model)
    for line in lines:
        sys.stdout.write(line + "\n")
