"""Pydantic models for conversion options, jobs and their outcomes."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Operation(str, Enum):
    EXTRACT = "extract"  # pld -> text
    COMPILE = "compile"  # text -> pld


class RunOptions(BaseModel):
    """Everything one CLI invocation asked for.

    Built once by argument parsing and handed to the orchestrator by value.
    """

    model_config = ConfigDict(frozen=True)

    operation: Operation
    input_path: Path
    output_path: Path
    output_extension: Optional[str] = Field(
        default=None, description="Replacement extension for folder mode, e.g. '.pld'"
    )
    function_name: Optional[str] = Field(
        default=None, description="Name of the generated function (compile only)"
    )
    watch: bool = False
    skip_initial_run: bool = False
    escape: bool = True

    @field_validator("output_extension")
    @classmethod
    def _normalize_extension(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        value = value if value.startswith(".") else f".{value}"
        if value == "." or "/" in value or "\\" in value:
            raise ValueError(f"Invalid output file extension: {value!r}")
        return value


class ConversionJob(BaseModel):
    """One input file, one output file, one operation."""

    model_config = ConfigDict(frozen=True)

    input_path: Path
    output_path: Path
    operation: Operation
    function_name: Optional[str] = None


class JobResult(BaseModel):
    """Outcome of a single protected job run."""

    job: ConversionJob
    ok: bool
    line_count: int = Field(default=0, ge=0)
    error: Optional[str] = None
