"""ServiceResult and ServiceError — operator-facing result contract.

Publishing and the console commands report through this type; the CLI
renders it and exits 1 when ``ok`` is False.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for operator-triggered operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"publish"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))


def format_result(
    result: ServiceResult, *, json_output: bool = False, verbose: bool = False
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise render it with Rich.
        verbose: Include error detail and extra columns in human output.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    from horizon.output import render_result

    return render_result(result, verbose=verbose)
