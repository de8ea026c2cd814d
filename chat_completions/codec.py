"""Wire encoding and decoding for the chat-completions endpoint."""

import dataclasses
import json
import math
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from chat_completions.exceptions import DecodingError
from chat_completions.models import ChatRequest

T = TypeVar("T")

SNIPPET_LIMIT = 8000
JSON_OBJECT_FORMAT = {"type": "json_object"}


def encode_chat_request(model: str, request: ChatRequest) -> bytes:
  """Serialize a chat request into the JSON body sent to the endpoint.

  ``response_format`` is only present in structured-output mode; otherwise
  the key is left out entirely.

  Args:
    model: Model identifier
    request: Call parameters

  Returns:
    UTF-8 encoded JSON body

  Raises:
    DecodingError: If the payload cannot be serialized
  """
  payload: dict[str, Any] = {
    "model": model,
    "messages": [
      {"role": "system", "content": request.system},
      {"role": "user", "content": request.user},
    ],
    "temperature": request.temperature,
  }

  if request.structured_output:
    payload["response_format"] = dict(JSON_OBJECT_FORMAT)

  try:
    return json.dumps(payload, allow_nan=False, ensure_ascii=False).encode("utf-8")
  except (TypeError, ValueError) as e:
    raise DecodingError(f"Failed to encode request: {e}", e) from e


def decode_chat_response(data: bytes) -> str:
  """Extract the first choice's message content from a success body.

  Args:
    data: Raw response body

  Returns:
    Content of ``choices[0].message.content``, or an empty string when the
    envelope has no choices

  Raises:
    DecodingError: If the body is not a valid success envelope
  """
  try:
    envelope = json.loads(data)
  except (UnicodeDecodeError, ValueError) as e:
    raise DecodingError(f"Bad response JSON: {e}. Body: {utf8_snippet(data)}", e) from e

  if not isinstance(envelope, dict) or not isinstance(envelope.get("choices"), list):
    raise DecodingError(
      f"Bad response JSON: missing 'choices' list. Body: {utf8_snippet(data)}"
    )

  contents = []
  for index, choice in enumerate(envelope["choices"]):
    message = choice.get("message") if isinstance(choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
      raise DecodingError(
        f"Bad response JSON: choices[{index}].message.content is not a string. "
        f"Body: {utf8_snippet(data)}"
      )
    contents.append(content)

  return contents[0] if contents else ""


def decode_error_message(data: bytes) -> Optional[str]:
  """Best-effort parse of an ``{"error": {"message": ...}}`` envelope.

  Returns:
    The error message, or None when the body is not an error envelope
  """
  try:
    envelope = json.loads(data)
  except (UnicodeDecodeError, ValueError):
    return None

  if not isinstance(envelope, dict):
    return None
  error = envelope.get("error")
  if not isinstance(error, dict):
    return None
  message = error.get("message")
  return message if isinstance(message, str) else None


def decode_structured_result(
  raw: str,
  result_type: Optional[Union[type[T], Callable[[Any], T]]] = None,
) -> Any:
  """Decode reply text produced in structured-output mode.

  Args:
    raw: Reply text, expected to hold a JSON document
    result_type: Optional dataclass or callable the parsed value is fed to

  Returns:
    The parsed JSON value, or the result of applying ``result_type`` to it

  Raises:
    DecodingError: If the text is not JSON or does not fit ``result_type``
  """
  snippet = utf8_snippet(raw.encode("utf-8"))
  try:
    value = json.loads(raw)
  except ValueError as e:
    raise DecodingError(f"Reply is not valid JSON: {e}. Body: {snippet}", e) from e

  if result_type is None:
    return value

  type_name = getattr(result_type, "__name__", repr(result_type))
  try:
    if dataclasses.is_dataclass(result_type) and isinstance(result_type, type):
      if not isinstance(value, dict):
        raise TypeError(f"expected a JSON object, got {type(value).__name__}")
      # Unknown keys are dropped; missing required fields still fail in __init__
      known = {
        f.name: value[f.name]
        for f in dataclasses.fields(result_type)
        if f.init and f.name in value
      }
      return result_type(**known)
    return result_type(value)
  except (TypeError, ValueError, KeyError) as e:
    raise DecodingError(f"Failed to decode {type_name}: {e}. Body: {snippet}", e) from e


def utf8_snippet(data: bytes, limit: int = SNIPPET_LIMIT) -> str:
  """Render raw bytes for an error message, bounded to ``limit`` characters.

  Args:
    data: Raw bytes
    limit: Maximum number of characters kept before the ellipsis marker

  Returns:
    Decoded text, truncated with a trailing ellipsis, or a placeholder naming
    the byte count when the bytes are not valid UTF-8
  """
  try:
    text = data.decode("utf-8")
  except UnicodeDecodeError:
    return f"<non-utf8 data {len(data)} bytes>"

  if len(text) > limit:
    return text[:limit] + "…"
  return text


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
  """Read a Retry-After header given in seconds.

  HTTP-date values and anything negative or non-finite are ignored.

  Returns:
    Delay in seconds, or None when absent or unparseable
  """
  value = _get_header(headers, "Retry-After")
  if value is None:
    return None

  try:
    seconds = float(value.strip())
  except (TypeError, ValueError):
    return None

  if not math.isfinite(seconds) or seconds < 0:
    return None
  return seconds


def parse_request_id(headers: Mapping[str, str]) -> Optional[str]:
  """Read the server-assigned ``x-request-id`` header."""
  return _get_header(headers, "x-request-id")


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
  # aiohttp hands back a case-insensitive multidict; plain dicts are scanned
  value = headers.get(name)
  if value is not None:
    return value
  lowered = name.lower()
  for key, candidate in headers.items():
    if key.lower() == lowered:
      return candidate
  return None
