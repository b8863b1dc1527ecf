"""Tool dispatcher: validate arguments, run the handler, serialize the result.

Failures never escape as exceptions. KonnectError, argument validation errors
and any unexpected exception are rendered as an error-flagged text result with
troubleshooting tips.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.konnect.client import KonnectClient
from src.konnect.errors import KonnectError
from src.logging.audit import (
    RequestTimer,
    generate_request_id,
    get_audit_logger,
    request_id_var,
)
from src.tools.registry import get_tool

TROUBLESHOOTING_TIPS = (
    "\n\nTroubleshooting tips:\n"
    "1. Verify your API key is valid and has sufficient permissions\n"
    "2. Check that the parameters provided are valid\n"
    "3. Ensure your network connection to the Kong API is working properly"
)


@dataclass
class ToolResult:
    text: str
    is_error: bool = False
    request_id: str = ""

    def to_content(self) -> dict:
        return {"content": [{"type": "text", "text": self.text}], "isError": self.is_error}


def _validation_message(method: str, error: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or '<arguments>'}: {err['msg']}"
        for err in error.errors()
    )
    return f"Invalid arguments for {method}: {problems}"


async def invoke_tool(
    client: KonnectClient,
    method: str,
    arguments: dict[str, Any] | None = None,
) -> ToolResult:
    """Run one tool to completion against the given client."""
    logger = get_audit_logger()
    rid = generate_request_id()
    token = request_id_var.set(rid)

    try:
        error: str | None = None
        with RequestTimer() as timer:
            try:
                tool = get_tool(method)
                validated = tool.parameters.model_validate(arguments or {})
                result = await tool.handler(client, **validated.model_dump())
            except ValidationError as e:
                error = _validation_message(method, e)
            except KonnectError as e:
                error = str(e)
            except Exception as e:
                logger.exception("Tool raised unexpectedly", extra={"audit_data": {"tool": method}})
                error = f"Unexpected error: {e}"

        audit = {"tool": method, "latency_ms": timer.elapsed_ms, "success": error is None}
        if error is not None:
            logger.warning("Tool failed", extra={"audit_data": {**audit, "error": error}})
            return ToolResult(
                text=f"Error: {error}{TROUBLESHOOTING_TIPS}", is_error=True, request_id=rid
            )

        logger.info("Tool invoked", extra={"audit_data": audit})
        return ToolResult(text=json.dumps(result, indent=2, default=str), request_id=rid)
    finally:
        request_id_var.reset(token)
