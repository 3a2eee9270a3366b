#!/usr/bin/env python3
"""
Wire models for JSON-RPC messages and the tool result envelope
"""

import json
from typing import Dict, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcp_harness.errors import ProtocolError, ToolExecutionError

JSONRPC_VERSION = "2.0"


class JSONRPCRequest(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: Optional[int] = None
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)

    def to_line(self) -> str:
        """Serialize as one newline-terminated line; notifications omit the id"""
        payload = self.model_dump(exclude_none=True)
        return json.dumps(payload) + "\n"


class JSONRPCError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: Optional[int] = None
    message: str = "Unknown error"
    data: Optional[Any] = None


class ContentItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "text"
    text: Optional[str] = None


class ToolCallResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: List[ContentItem] = Field(default_factory=list)
    isError: Optional[bool] = None


class ToolErrorInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None


class ToolResult(BaseModel):
    """The {success, data, error} envelope carried in result.content[0].text"""

    model_config = ConfigDict(extra="allow")

    success: bool
    data: Optional[Any] = None
    error: Optional[ToolErrorInfo] = None

    @field_validator("error", mode="before")
    @classmethod
    def _error_as_object(cls, value: Any) -> Any:
        # Some servers report the error as a bare string
        if value is None or isinstance(value, (dict, ToolErrorInfo)):
            return value
        return {"message": str(value)}

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a key in a dict-shaped data payload"""
        if isinstance(self.data, dict):
            return self.data.get(key, default)
        return default


def unwrap_tool_result(response: Dict[str, Any], tool: Optional[str] = None) -> ToolResult:
    """Turn a tools/call JSON-RPC response into a successful ToolResult

    Args:
        response: Parsed JSON-RPC response object
        tool: Tool name, used in error messages

    Returns:
        The parsed envelope

    Raises:
        ProtocolError: The response has an error field or no parseable envelope
        ToolExecutionError: The envelope reports success: false
    """
    if response.get("error"):
        error = _parse_error(response["error"])
        raise ProtocolError(f"Tool call failed: {error.message}", tool=tool, code=error.code)

    try:
        call_result = ToolCallResult.model_validate(response.get("result") or {})
    except ValidationError as e:
        raise ProtocolError(f"Tool call returned an invalid result: {e}", tool=tool) from e

    if not call_result.content or call_result.content[0].text is None:
        raise ProtocolError("Tool call returned no text content", tool=tool)

    try:
        envelope = ToolResult.model_validate_json(call_result.content[0].text)
    except ValidationError as e:
        raise ProtocolError(f"Tool result is not a valid envelope: {e}", tool=tool) from e

    if not envelope.success:
        raise ToolExecutionError(
            f"Tool execution failed: {envelope.error_message or 'Unknown error'}",
            tool=tool,
            error_type=envelope.error.type if envelope.error else None
        )

    return envelope


def _parse_error(error: Union[Dict[str, Any], str, Any]) -> JSONRPCError:
    if isinstance(error, dict):
        try:
            return JSONRPCError.model_validate(error)
        except ValidationError:
            return JSONRPCError(message=str(error.get("message", error)))
    return JSONRPCError(message=str(error))
