from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from tablelens.config.loader import InstructionConfig
from tablelens.errors import ResolutionError
from tablelens.models.chart import ChartSelection, ChartType
from tablelens.services.instruction import (
    HttpInterpretationClient,
    InstructionResolver,
    MistralInterpretationClient,
    build_client,
    build_prompt,
)

COLUMNS = ["Date", "Revenue", "Users"]


def _response(status: int = 200, body=None, text: str | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    if body is None:
        resp.json.side_effect = ValueError("no json")
        resp.text = text or ""
    else:
        resp.json.return_value = body
        resp.text = text if text is not None else json.dumps(body)
    return resp


def _mistral_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class StubClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls: list[tuple[str, list[str]]] = []

    def interpret(self, instruction, columns):
        self.calls.append((instruction, list(columns)))
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


# ----- resolver validation -----

def test_resolver_accepts_valid_payload():
    client = StubClient({"chartType": "line", "xColumn": "Date", "yColumn": "Revenue"})
    selection = InstructionResolver(client).resolve("revenue over time", COLUMNS)
    assert selection == ChartSelection(ChartType.LINE, "Date", "Revenue")
    assert client.calls == [("revenue over time", COLUMNS)]


@pytest.mark.parametrize(
    "payload",
    [
        {"chartType": "line", "xColumn": "Date"},
        {"xColumn": "Date", "yColumn": "Revenue"},
        {"chartType": "scatter", "xColumn": "Date", "yColumn": "Revenue"},
        {"chartType": "bar", "xColumn": "", "yColumn": "Revenue"},
        {"chartType": "bar", "xColumn": 3, "yColumn": "Revenue"},
        ["bar", "Date", "Revenue"],
    ],
)
def test_resolver_rejects_incomplete_or_invalid_payload(payload):
    with pytest.raises(ResolutionError):
        InstructionResolver(StubClient(payload)).resolve("chart it", COLUMNS)


def test_resolver_rejects_unknown_columns():
    client = StubClient({"chartType": "bar", "xColumn": "Region", "yColumn": "Revenue"})
    with pytest.raises(ResolutionError, match="unknown columns"):
        InstructionResolver(client).resolve("by region", COLUMNS)


def test_resolver_maps_error_payload():
    client = StubClient({"error": "Mistral API error", "details": "rate limited"})
    with pytest.raises(ResolutionError) as e:
        InstructionResolver(client).resolve("chart", COLUMNS)
    assert str(e.value) == "Mistral API error"
    assert e.value.details == "rate limited"


@pytest.mark.parametrize("instruction,columns", [("", COLUMNS), ("   ", COLUMNS), ("chart", [])])
def test_resolver_requires_instruction_and_columns(instruction, columns):
    client = StubClient({"chartType": "bar", "xColumn": "Date", "yColumn": "Revenue"})
    with pytest.raises(ResolutionError, match="upload a dataset"):
        InstructionResolver(client).resolve(instruction, columns)
    assert client.calls == []


# ----- http client -----

def test_http_client_posts_contract_body():
    body = {"chartType": "pie", "xColumn": "Date", "yColumn": "Users"}
    with patch("tablelens.services.instruction.requests.post", return_value=_response(200, body)) as mock_post:
        out = HttpInterpretationClient("http://svc/api/mistral", timeout=5).interpret("share", COLUMNS)
    assert out == body
    mock_post.assert_called_once_with(
        "http://svc/api/mistral",
        json={"instruction": "share", "columns": COLUMNS},
        timeout=5,
    )


def test_http_client_non_2xx_uses_error_body():
    resp = _response(500, {"error": "MISTRAL_API_KEY is not set"})
    with patch("tablelens.services.instruction.requests.post", return_value=resp):
        with pytest.raises(ResolutionError, match="MISTRAL_API_KEY is not set"):
            HttpInterpretationClient("http://svc").interpret("x", COLUMNS)


def test_http_client_non_2xx_without_json():
    with patch("tablelens.services.instruction.requests.post", return_value=_response(502, None, "bad gateway")):
        with pytest.raises(ResolutionError, match="status 502") as e:
            HttpInterpretationClient("http://svc").interpret("x", COLUMNS)
    assert e.value.details == "bad gateway"


def test_http_client_unparsable_body():
    with patch("tablelens.services.instruction.requests.post", return_value=_response(200, None, "<html>")):
        with pytest.raises(ResolutionError, match="Invalid JSON"):
            HttpInterpretationClient("http://svc").interpret("x", COLUMNS)


def test_http_client_connection_error():
    with patch(
        "tablelens.services.instruction.requests.post",
        side_effect=requests.ConnectionError("refused"),
    ):
        with pytest.raises(ResolutionError, match="Failed to interpret instruction"):
            HttpInterpretationClient("http://svc").interpret("x", COLUMNS)


# ----- mistral client -----

def _mistral(api_key: str | None = "secret") -> MistralInterpretationClient:
    return MistralInterpretationClient(
        api_key, api_url="https://api.mistral.ai/v1/chat/completions", model="mistral-small", timeout=7
    )


def test_mistral_client_missing_key_never_calls_api():
    with patch("tablelens.services.instruction.requests.post") as mock_post:
        with pytest.raises(ResolutionError, match="MISTRAL_API_KEY is not set"):
            _mistral(None).interpret("x", COLUMNS)
    mock_post.assert_not_called()


def test_mistral_client_request_shape_and_parse():
    content = '{"chartType": "bar", "xColumn": "Date", "yColumn": "Users"}'
    with patch(
        "tablelens.services.instruction.requests.post",
        return_value=_response(200, _mistral_body(content)),
    ) as mock_post:
        out = _mistral().interpret("users per day", COLUMNS)
    assert out == {"chartType": "bar", "xColumn": "Date", "yColumn": "Users"}
    args, kwargs = mock_post.call_args
    assert args[0] == "https://api.mistral.ai/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"]["model"] == "mistral-small"
    assert kwargs["json"]["temperature"] == 0
    prompt = kwargs["json"]["messages"][0]["content"]
    assert 'Instruction: "users per day"' in prompt
    assert "Available columns: Date, Revenue, Users" in prompt
    assert kwargs["timeout"] == 7


def test_mistral_client_strips_code_fences():
    content = '```json\n{"chartType": "donut", "xColumn": "Date", "yColumn": "Revenue"}\n```'
    with patch(
        "tablelens.services.instruction.requests.post",
        return_value=_response(200, _mistral_body(content)),
    ):
        assert _mistral().interpret("x", COLUMNS)["chartType"] == "donut"


def test_mistral_client_invalid_content():
    with patch(
        "tablelens.services.instruction.requests.post",
        return_value=_response(200, _mistral_body("Sure! Here is a bar chart.")),
    ):
        with pytest.raises(ResolutionError, match="Invalid JSON response") as e:
            _mistral().interpret("x", COLUMNS)
    assert "bar chart" in e.value.details


def test_mistral_client_api_error():
    with patch(
        "tablelens.services.instruction.requests.post",
        return_value=_response(401, {"message": "Unauthorized"}),
    ):
        with pytest.raises(ResolutionError, match="Mistral API error"):
            _mistral().interpret("x", COLUMNS)


def test_mistral_client_unexpected_shape():
    with patch("tablelens.services.instruction.requests.post", return_value=_response(200, {"choices": []})):
        with pytest.raises(ResolutionError, match="Invalid JSON response"):
            _mistral().interpret("x", COLUMNS)


def test_build_prompt_lists_columns():
    prompt = build_prompt("total revenue", ["A", "B"])
    assert "Available columns: A, B" in prompt
    assert '"chartType": "bar|line|pie|donut"' in prompt


def test_build_client_selects_provider():
    assert isinstance(build_client(InstructionConfig()), MistralInterpretationClient)
    http = build_client(InstructionConfig(provider="http", endpoint="http://svc"))
    assert isinstance(http, HttpInterpretationClient)
    with pytest.raises(ResolutionError):
        build_client(InstructionConfig(provider="http", endpoint=None))
