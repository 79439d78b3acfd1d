"""
Tests for c4c_odata.core module.
"""

import pytest
from unittest.mock import Mock, patch, MagicMock

from c4c_odata.core.errors import ODataError, ODataUpstreamError
from c4c_odata.core.session import ODataAuth, ODataConfig, ODataSession
from c4c_odata.core.connection import ConnectionContext
from c4c_odata.odata.params import ODataQueryParam


def _response(status=200, payload=None, text=""):
    r = Mock()
    r.status_code = status
    r.headers = {"Content-Type": "application/json"}
    r.text = text
    if payload is None:
        r.json.side_effect = ValueError("no json")
    else:
        r.json.return_value = payload
    return r


class TestODataConfig:
    """Tests for ODataConfig dataclass."""

    def test_default_values(self):
        cfg = ODataConfig(
            base_url="https://test.com/odata/",
            auth=ODataAuth("basic", ("user", "pass")),
        )
        assert cfg.lang == "EN"
        assert cfg.timeout == 60.0
        assert cfg.retries == 3
        assert cfg.verify is True
        assert cfg.default_sap_client is None


class TestODataUpstreamError:
    """Tests for ODataUpstreamError exception."""

    def test_error_attributes(self):
        err = ODataUpstreamError(
            status=404,
            body="Not found",
            url="https://test.com/entity",
            headers={"x-request-id": "123"},
        )
        assert err.status == 404
        assert err.body == "Not found"
        assert err.url == "https://test.com/entity"
        assert err.headers == {"x-request-id": "123"}
        assert isinstance(err, ODataError)

    def test_error_message_truncation(self):
        err = ODataUpstreamError(500, "x" * 2000, "https://test.com")
        assert len(str(err)) < 1500


class TestODataSession:
    """Tests for ODataSession."""

    @pytest.fixture
    def http(self):
        with patch("c4c_odata.core.session.requests.Session") as mock_session_class:
            mock_http = MagicMock()
            mock_session_class.return_value = mock_http
            yield mock_http

    def _session(self, **kwargs):
        cfg = ODataConfig(
            base_url="https://test.com/odata",
            auth=kwargs.pop("auth", ODataAuth("basic", ("user", "pass"))),
            **kwargs,
        )
        return ODataSession(cfg)

    def test_basic_auth(self, http):
        sess = self._session()
        assert sess.base == "https://test.com/odata/"
        assert http.auth == ("user", "pass")

    def test_bearer_auth(self, http):
        self._session(auth=ODataAuth("bearer", "mytoken"))
        headers = http.headers.update.call_args_list[0].args[0]
        assert headers == {"Authorization": "Bearer mytoken"}

    def test_unknown_auth_kind(self, http):
        with pytest.raises(ValueError, match="auth.kind"):
            self._session(auth=ODataAuth("digest", "x"))

    def test_context_manager(self, http):
        with self._session() as sess:
            assert sess is not None
        http.close.assert_called_once()

    def test_get_sends_query_param(self, http):
        http.get.return_value = _response(payload={"d": {"results": []}})
        sess = self._session(default_sap_client="100")

        param = ODataQueryParam().filter("A eq 1").top(5)
        assert sess.get("svc", "/LeadCollection", param) == {"d": {"results": []}}

        args, kwargs = http.get.call_args
        assert args[0] == "https://test.com/odata/svc/LeadCollection"
        assert kwargs["params"] == {
            "$format": "json",
            "sap-client": "100",
            "$filter": "A eq 1",
            "$top": "5",
        }

    def test_get_accepts_plain_dict(self, http):
        http.get.return_value = _response(payload={})
        sess = self._session()
        sess.get("svc", "LeadCollection", {"$top": "1"}, sap_client="200")
        assert http.get.call_args.kwargs["params"] == {
            "$format": "json",
            "sap-client": "200",
            "$top": "1",
        }

    def test_sap_error_extracted(self, http):
        http.get.return_value = _response(
            status=400,
            payload={"error": {"code": "SY/530", "message": {"lang": "en", "value": "Bad filter"}}},
        )
        sess = self._session()
        with pytest.raises(ODataUpstreamError) as exc:
            sess.get("svc", "LeadCollection")
        assert exc.value.status == 400
        assert exc.value.body == "code=SY/530 | message=Bad filter"

    def test_non_json_error_uses_text(self, http):
        http.get.return_value = _response(status=500, text="boom")
        sess = self._session()
        with pytest.raises(ODataUpstreamError, match="boom"):
            sess.get("svc", "LeadCollection")

    def test_redirect_is_an_error(self, http):
        http.get.return_value = _response(status=302, text="login")
        with pytest.raises(ODataUpstreamError):
            self._session().get_url("https://test.com/next")


class TestConnectionContext:
    """Tests for ConnectionContext."""

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_base_url_raises(self):
        with pytest.raises(ValueError, match="Missing base_url"):
            ConnectionContext(base_url="")

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_credentials_raises(self):
        with pytest.raises(ValueError, match="Missing credentials"):
            ConnectionContext(base_url="https://test.com/odata/")

    @patch.dict("os.environ", {
        "C4C_BASE_URL": "https://env.test.com/odata/",
        "C4C_USER": "envuser",
        "C4C_PASS": "envpass",
        "C4C_SAP_CLIENT": "300",
        "C4C_VERIFY_TLS": "false",
    })
    def test_reads_from_environment(self):
        conn = ConnectionContext()
        assert conn.base_url == "https://env.test.com/odata/"
        assert conn.sap_client == "300"
        cfg = conn.config()
        assert cfg.auth == ODataAuth("basic", ("envuser", "envpass"))
        assert cfg.verify is False

    def test_explicit_params_override_env(self):
        conn = ConnectionContext(
            base_url="https://explicit.com/odata/",
            bearer_token="token",
            sap_client="400",
        )
        assert conn.base_url == "https://explicit.com/odata/"
        assert conn.sap_client == "400"
        assert conn.config().auth == ODataAuth("bearer", "token")

    @patch("c4c_odata.core.session.requests.Session")
    def test_get_service(self, mock_session_class):
        with ConnectionContext(base_url="https://c.com/", user="u", password="p", sap_client="1") as conn:
            svc = conn.get_service("c4codataapi")
            assert svc.service == "c4codataapi"
            assert svc.default_sap_client == "1"
            assert svc.sess is conn.session
        mock_session_class.return_value.close.assert_called_once()
