from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import jsonschema
import requests
from jsonschema.exceptions import ValidationError

from ..config.loader import InstructionConfig
from ..errors import ResolutionError
from ..models.chart import ChartSelection, ChartType

"""Natural-language instruction -> ChartSelection.

Contract with the interpretation service:

    request  {"instruction": str, "columns": [str, ...]}
    success  {"chartType": "bar|line|pie|donut", "xColumn": str, "yColumn": str}
    failure  {"error": str, "details"?: str}

Two clients speak it: HttpInterpretationClient posts to a service endpoint,
MistralInterpretationClient plays the service role itself and asks the
Mistral chat-completions API. InstructionResolver validates whatever comes
back; a selection is either accepted whole or rejected with ResolutionError.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "CHART_SELECTION_SCHEMA",
    "InterpretationClient",
    "HttpInterpretationClient",
    "MistralInterpretationClient",
    "InstructionResolver",
    "build_client",
    "build_prompt",
]

CHART_SELECTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["chartType", "xColumn", "yColumn"],
    "properties": {
        "chartType": {"type": "string", "enum": ChartType.values()},
        "xColumn": {"type": "string", "minLength": 1},
        "yColumn": {"type": "string", "minLength": 1},
    },
}

PROMPT_TEMPLATE = """
You are an assistant that converts natural language instructions into chart parameters.

Instruction: "{instruction}"
Available columns: {columns}

Respond ONLY with valid JSON in this exact format:
{{
  "chartType": "bar|line|pie|donut",
  "xColumn": "column_name",
  "yColumn": "column_name"
}}

- Select the most appropriate chartType based on the instruction.
- Use only the provided columns for xColumn and yColumn.
- If the instruction is unclear, choose sensible defaults.
- Do NOT include any explanation or extra text.
"""


class InterpretationClient(Protocol):
    def interpret(self, instruction: str, columns: Sequence[str]) -> dict[str, Any]:
        ...


def build_prompt(instruction: str, columns: Sequence[str]) -> str:
    return PROMPT_TEMPLATE.format(instruction=instruction, columns=", ".join(columns))


def _strip_fences(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


def _error_from_body(resp: requests.Response, fallback: str) -> ResolutionError:
    try:
        body = resp.json()
    except ValueError:
        return ResolutionError(f"{fallback} (status {resp.status_code})", details=resp.text)
    if isinstance(body, dict) and body.get("error"):
        return ResolutionError(str(body["error"]), details=body.get("details"))
    return ResolutionError(f"{fallback} (status {resp.status_code})", details=resp.text)


class HttpInterpretationClient:
    """POST {instruction, columns} to an interpretation endpoint."""

    def __init__(self, endpoint: str, timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.timeout = timeout

    def interpret(self, instruction: str, columns: Sequence[str]) -> dict[str, Any]:
        payload = {"instruction": instruction, "columns": list(columns)}
        try:
            r = requests.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ResolutionError("Failed to interpret instruction", details=str(e)) from e
        if not r.ok:
            raise _error_from_body(r, "Interpretation service error")
        try:
            return r.json()
        except ValueError as e:
            raise ResolutionError("Invalid JSON response", details=r.text) from e


class MistralInterpretationClient:
    """Ask the Mistral chat-completions API for chart parameters."""

    def __init__(
        self,
        api_key: str | None,
        *,
        api_url: str,
        model: str,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    def interpret(self, instruction: str, columns: Sequence[str]) -> dict[str, Any]:
        if not self.api_key:
            raise ResolutionError("MISTRAL_API_KEY is not set")
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(instruction, columns)}],
            "temperature": 0,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            r = requests.post(self.api_url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise ResolutionError("Failed to interpret instruction", details=str(e)) from e
        if not r.ok:
            raise ResolutionError("Mistral API error", details=r.text)

        try:
            data = r.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ResolutionError("Invalid JSON response", details=r.text) from e

        raw = _strip_fences(str(content or ""))
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ResolutionError("Invalid JSON response", details=raw) from e


def build_client(cfg: InstructionConfig) -> InterpretationClient:
    if cfg.provider == "http":
        if not cfg.endpoint:
            raise ResolutionError("instruction endpoint is not configured")
        return HttpInterpretationClient(cfg.endpoint, timeout=cfg.timeout_seconds)
    return MistralInterpretationClient(
        cfg.api_key,
        api_url=cfg.api_url,
        model=cfg.model,
        timeout=cfg.timeout_seconds,
    )


class InstructionResolver:
    """Validate interpretation results into a ChartSelection."""

    def __init__(self, client: InterpretationClient) -> None:
        self.client = client

    def resolve(self, instruction: str, columns: Sequence[str]) -> ChartSelection:
        """Resolve ``instruction`` against the available ``columns``.

        Raises:
            ResolutionError: no dataset or instruction, service failure,
                error payload, incomplete payload, unknown chart type, or a
                column outside ``columns``
        """
        if not instruction or not instruction.strip() or not columns:
            raise ResolutionError("Please upload a dataset first.")

        payload = self.client.interpret(instruction, columns)
        if not isinstance(payload, dict):
            raise ResolutionError(
                "Couldn't understand the instruction", details=json.dumps(payload, default=str)
            )
        if "error" in payload and payload.get("error"):
            raise ResolutionError(str(payload["error"]), details=payload.get("details"))

        try:
            jsonschema.validate(payload, CHART_SELECTION_SCHEMA)
        except ValidationError as e:
            raise ResolutionError(
                f"Couldn't understand the instruction: {e.message}",
                details=json.dumps(payload, default=str),
            ) from e

        available = set(columns)
        unknown = [c for c in (payload["xColumn"], payload["yColumn"]) if c not in available]
        if unknown:
            raise ResolutionError(f"instruction referenced unknown columns: {unknown}")

        selection = ChartSelection(
            chart_type=ChartType(payload["chartType"]),
            x_column=payload["xColumn"],
            y_column=payload["yColumn"],
        )
        logger.debug(f"instruction resolved: {selection.to_payload()}")
        return selection
