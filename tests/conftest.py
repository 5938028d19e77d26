# tests/conftest.py
import json

import pytest

from pricing_types import EndpointRow

RUN_TS = "2025-01-01T12:00:00+00:00"


class FakeRaw:
    def __init__(self, content: bytes):
        self._content = content
        self._pos = 0

    def read1(self, amt=-1, decode_content=True):
        chunk = self._content[self._pos:self._pos + amt]
        self._pos += len(chunk)
        return chunk


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", reason="OK", content=None):
        if content is None:
            content = json.dumps(payload).encode() if payload is not None else text.encode()
        self.status_code = status_code
        self.reason = reason
        self.encoding = "utf-8"
        self._content = content
        self.raw = FakeRaw(content)
        self.closed = False

    def close(self):
        self.closed = True
        # a reused return_value replays its body on the next attempt
        self.raw = FakeRaw(self._content)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def no_sleep(mocker):
    import openrouter_client
    return mocker.patch.object(openrouter_client.time, "sleep")


@pytest.fixture
def make_row():
    def _make(model_id="m1", provider="mistral", tag="a", status=0, prompt=1e-6, completion=2e-6, **kw):
        fields = dict(
            model_id=model_id, provider_name=provider, endpoint_name=kw.pop("endpoint_name", None),
            tag=tag, status=status, quantization=None, context_length=32768,
            max_completion_tokens=None, max_prompt_tokens=None,
            prompt_cost_per_token=prompt, completion_cost_per_token=completion,
            prompt_cost_per_1m=None if prompt is None else prompt * 1_000_000,
            completion_cost_per_1m=None if completion is None else completion * 1_000_000,
            supports_implicit_caching=False, uptime_last_30m=None,
            source_model_pricing_prompt=None, source_model_pricing_completion=None,
            extracted_at=RUN_TS,
        )
        fields.update(kw)
        return EndpointRow(**fields)
    return _make


@pytest.fixture
def sample_catalog():
    return [
        {"id": "m1", "pricing": {"prompt": "0.000001", "completion": "0.000002"}},
        {"id": "m2", "pricing": {"prompt": "0.0000005", "completion": "0.0000015"}},
    ]


@pytest.fixture
def m1_endpoints_payload():
    return {"data": {"id": "m1", "endpoints": [
        {"provider_name": "Mistral", "name": "Mistral | m1", "tag": "a", "status": 0,
         "pricing": {"prompt": "0.000001", "completion": "0.000002"},
         "context_length": 32768, "supports_implicit_caching": True, "uptime_last_30m": 99.5},
        {"provider_name": "Together", "tag": "together", "status": 0,
         "pricing": {"prompt": "0.0000009", "completion": "0.0000009"}},
    ]}}
