"""
Tests for c4c_odata.api gateway.
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from c4c_odata.api.gateway import ODataGateway, build_filter, build_params, create_app
from c4c_odata.api.models import FilterCondition, QueryOptions
from c4c_odata.core.errors import ODataUpstreamError, ValidationError


@pytest.fixture
def gateway():
    return ODataGateway(
        base_url="https://test.com/odata/",
        user="user",
        password="pass",
        api_key="secret",
        max_top=100,
        max_pages=2,
    )


@pytest.fixture
def client(gateway):
    return TestClient(create_app(gateway))


HEADERS = {"x-api-key": "secret"}


class TestBuildFilter:
    """Tests for JSON condition translation."""

    def test_conditions_in_order(self):
        f = build_filter([
            FilterCondition(field="Status", op="in", values=["A", "B"]),
            FilterCondition(field="Amount", op="gt", value=100),
        ])
        assert f.build() == "(Status eq 'A' or Status eq 'B') and Amount gt 100"

    def test_explicit_null(self):
        f = build_filter([FilterCondition(field="Owner", value=None)])
        assert f.build() == "Owner eq null"

    def test_missing_value(self):
        with pytest.raises(ValidationError, match="value is required"):
            build_filter([FilterCondition(field="Owner", op="ne")])

    def test_between_typed(self):
        f = build_filter([FilterCondition(
            field="CreationDateTime",
            op="between",
            values=["2020-01-01T00:00:00Z", "2020-02-01T00:00:00Z"],
            value_type="datetimeoffset",
            include_boundary=False,
        )])
        assert f.build() == (
            "(CreationDateTime gt datetimeoffset'2020-01-01T00:00:00.000Z' and "
            "CreationDateTime lt datetimeoffset'2020-02-01T00:00:00.000Z')"
        )

    def test_between_needs_two_values(self):
        with pytest.raises(ValidationError):
            build_filter([FilterCondition(field="A", op="between", values=[1])])

    def test_invalid_date(self):
        with pytest.raises(ValidationError, match="ISO-8601"):
            build_filter([FilterCondition(field="A", value="soon", value_type="datetime")])

    def test_build_params_caps_top(self):
        p = build_params(QueryOptions(top=1000, select=["A"]), max_top=100)
        assert p.to_params() == {"$format": "json", "$select": "A", "$top": "100"}

    def test_raw_filter_used_without_conditions(self):
        p = build_params(QueryOptions(filter="A eq 1"))
        assert p.to_params()["$filter"] == "A eq 1"


class TestGatewayEndpoints:

    def test_health(self, client):
        assert client.get("/health").json()["ok"] is True

    def test_api_key_required(self, client):
        r = client.post("/filter/build", json={})
        assert r.status_code == 401

    def test_build(self, client):
        r = client.post("/filter/build", headers=HEADERS, json={
            "conditions": [
                {"field": "StatusCode", "op": "eq", "value": "1"},
                {"field": "StatusCode", "op": "eq", "value": "2"},
            ],
            "orderby": [{"field": "Name", "order": "asc"}],
            "top": 10,
        })
        assert r.status_code == 200
        body = r.json()
        assert body["filter"] == "(StatusCode eq '1' or StatusCode eq '2')"
        assert body["params"]["$orderby"] == "Name asc"
        assert body["query"].startswith("%24format=json&%24filter=")

    def test_build_validation_error(self, client):
        r = client.post("/filter/build", headers=HEADERS, json={
            "conditions": [{"field": "StatusCode", "op": "gt"}],
        })
        assert r.status_code == 422
        assert "value is required" in r.json()["detail"]

    def test_query(self, client, gateway):
        sess = MagicMock()
        sess.__enter__.return_value = sess
        sess.get.return_value = {"d": {"results": [{"ObjectID": "1"}]}}
        with patch.object(gateway, "build_session", return_value=sess):
            r = client.post("/query", headers=HEADERS, json={
                "service": "c4codataapi",
                "entity_set": "LeadCollection",
                "conditions": [{"field": "StatusCode", "value": "1"}],
            })
        assert r.status_code == 200
        assert r.json()["count"] == 1
        param = sess.get.call_args.args[2]
        assert param.to_params()["$filter"] == "StatusCode eq '1'"
        assert param.to_params()["$top"] == "100"

    def test_query_upstream_error(self, client, gateway):
        sess = MagicMock()
        sess.__enter__.return_value = sess
        sess.get.side_effect = ODataUpstreamError(500, "boom", "https://test.com/x")
        with patch.object(gateway, "build_session", return_value=sess):
            r = client.post("/query", headers=HEADERS, json={})
        assert r.status_code == 502
        assert r.json()["detail"]["upstream_status"] == 500
