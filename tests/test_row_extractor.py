import pytest

from pricing_types import TaskResult
from row_extractor import extract_rows, to_number

RUN_TS = "2025-01-01T12:00:00+00:00"


@pytest.mark.parametrize("raw,expected", [
    ("0.000001", 1e-6), (5, 5), (0, 0), ("0", 0.0), (2.5, 2.5),
    (None, None), ("", None), ("  ", None), ("n/a", None), ("nan", None),
    ("inf", None), ({"x": 1}, None), ([1], None), (10**400, None), ("1e400", None),
])
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_filters_providers_case_insensitively(m1_endpoints_payload, sample_catalog):
    results = [TaskResult("m1", True, payload=m1_endpoints_payload)]
    index = {m["id"]: m for m in sample_catalog}
    rows = extract_rows(results, {"mistral"}, index, RUN_TS)

    assert len(rows) == 1
    row = rows[0]
    assert row.provider_name == "Mistral"
    assert row.model_id == "m1"
    assert row.endpoint_name == "Mistral | m1"
    assert row.prompt_cost_per_1m == pytest.approx(1.0)
    assert row.completion_cost_per_1m == pytest.approx(2.0)
    assert row.supports_implicit_caching is True
    assert row.uptime_last_30m == 99.5
    assert row.source_model_pricing_prompt == pytest.approx(1e-6)
    assert row.source_model_pricing_completion == pytest.approx(2e-6)


def test_missing_pricing_is_unknown_not_zero():
    payload = {"data": {"id": "m1", "endpoints": [
        {"provider_name": "nebius", "tag": "fp8", "pricing": {"completion": "0.000003"}, "status": ""},
        {"provider_name": "nebius", "tag": "x", "max_prompt_tokens": "lots"},
    ]}}
    rows = extract_rows([TaskResult("m1", True, payload=payload)], ["nebius"], {}, RUN_TS)

    assert rows[0].prompt_cost_per_token is None
    assert rows[0].prompt_cost_per_1m is None
    assert rows[0].completion_cost_per_1m == pytest.approx(3.0)
    assert rows[0].status is None
    assert rows[1].completion_cost_per_token is None
    assert rows[1].max_prompt_tokens is None
    assert rows[1].source_model_pricing_prompt is None


def test_skips_failures_and_bad_shapes():
    results = [
        TaskResult("bad", False, error="HTTP 500"),
        TaskResult("none", True, payload=None),
        TaskResult("notlist", True, payload={"data": {"endpoints": "nope"}}),
        TaskResult("mixed", True, payload={"data": {"endpoints": [
            "junk", {"provider_name": "   "}, {"tag": "x"}, {"provider_name": " Mistral ", "tag": "ok"},
        ]}}),
    ]
    rows = extract_rows(results, ["mistral"], {}, RUN_TS)
    assert [(r.model_id, r.provider_name, r.tag) for r in rows] == [("mixed", "Mistral", "ok")]


def test_rows_share_run_timestamp(m1_endpoints_payload):
    payload2 = {"data": {"id": "m2", "endpoints": [{"provider_name": "together", "tag": "t"}]}}
    results = [TaskResult("m1", True, payload=m1_endpoints_payload), TaskResult("m2", True, payload=payload2)]
    rows = extract_rows(results, ["mistral", "together"], {}, RUN_TS)
    assert len(rows) == 3
    assert {r.extracted_at for r in rows} == {RUN_TS}


def test_falls_back_to_task_model_id():
    payload = {"data": {"endpoints": [{"provider_name": "mistral"}]}}
    rows = extract_rows([TaskResult("org/model", True, payload=payload)], ["mistral"], {}, RUN_TS)
    assert rows[0].model_id == "org/model"
    assert rows[0].tag is None
    assert rows[0].supports_implicit_caching is False


def test_oversized_integer_field_becomes_unknown(m1_endpoints_payload, sample_catalog):
    m1_endpoints_payload["data"]["endpoints"][0]["context_length"] = 10**400
    results = [TaskResult("m1", True, payload=m1_endpoints_payload)]
    rows = extract_rows(results, {"mistral"}, {m["id"]: m for m in sample_catalog}, RUN_TS)
    assert rows[0].context_length is None
    assert rows[0].prompt_cost_per_1m == pytest.approx(1.0)
