"""Machine-readable output for commands that take --json.

Everything goes to stdout through machine_output; human-facing messages stay
on stderr so `stackyard graph --json | jq` keeps working.
"""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, NoReturn

from pydantic import BaseModel, ConfigDict, Field

from stackyard.cli.output import machine_output


class ErrorResponse(BaseModel):
    """Failure payload printed instead of the normal response."""

    model_config = ConfigDict(strict=True)

    error: str
    error_type: str
    exit_code: int = Field(default=1, ge=0, le=255)


def to_jsonable(value: Any) -> Any:
    """Convert models, dataclasses and paths into plain JSON values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Path):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(item) for item in value]
    return value


def emit_json(payload: BaseModel | dict[str, Any]) -> None:
    machine_output(json.dumps(to_jsonable(payload), indent=2))


def emit_json_error(error: str, error_type: str, exit_code: int = 1) -> NoReturn:
    """Print an ErrorResponse and exit with exit_code."""
    emit_json(ErrorResponse(error=error, error_type=error_type, exit_code=exit_code))
    raise SystemExit(exit_code)
