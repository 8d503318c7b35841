from pathlib import Path

import yaml

from api_flow_generator.analyzer.auth import detect_authentication_flow, is_login_endpoint
from api_flow_generator.analyzer.base import EndpointInfo

FIXTURES = Path(__file__).parent / "fixtures"


def _ep(method="POST", path="/sessions", operation_id="openSession", **extra):
    return EndpointInfo(method=method, path=path, operation_id=operation_id, **extra)


class TestIsLoginEndpoint:
    def test_operation_id_hint(self):
        assert is_login_endpoint(_ep(operation_id="userLogin"))
        assert is_login_endpoint(_ep(operation_id="signIn"))

    def test_summary_hint(self):
        assert is_login_endpoint(_ep(summary="使用者登入"))
        assert is_login_endpoint(_ep(summary="Login with password"))

    def test_path_hint(self):
        assert is_login_endpoint(_ep(path="/auth/token"))
        assert is_login_endpoint(_ep(path="/api/login"))

    def test_plain_endpoint(self):
        assert not is_login_endpoint(_ep(method="GET", path="/users", operation_id="listUsers"))


class TestDetectAuthenticationFlow:
    def test_detects_fixture_login(self):
        data = yaml.safe_load((FIXTURES / "user_service.yaml").read_text(encoding="utf-8"))
        flow = detect_authentication_flow([EndpointInfo(**item) for item in data])

        assert flow is not None
        assert flow.operation_id == "login"
        assert flow.credential_fields == ["username", "password"]
        assert flow.token_field == "token"

    def test_token_field_from_response(self):
        ep = _ep(
            operation_id="login",
            request_schema={
                "type": "object",
                "properties": {"email": {"type": "string"}, "pwd": {"type": "string"}, "remember": {"type": "boolean"}},
            },
            responses={"200": {"type": "object", "properties": {"accessToken": {"type": "string"}}}},
        )
        flow = detect_authentication_flow([ep])
        assert flow.credential_fields == ["email", "pwd"]
        assert flow.token_field == "accessToken"

    def test_defaults_without_schemas(self):
        flow = detect_authentication_flow([_ep(operation_id="login")])
        assert flow.credential_fields == ["username", "password"]
        assert flow.token_field == "token"

    def test_first_login_wins(self):
        flow = detect_authentication_flow([
            _ep(method="GET", path="/users", operation_id="listUsers"),
            _ep(operation_id="login"),
            _ep(operation_id="adminLogin"),
        ])
        assert flow.operation_id == "login"

    def test_no_login_endpoint(self):
        assert detect_authentication_flow([_ep(method="GET", path="/users", operation_id="listUsers")]) is None
        assert detect_authentication_flow([]) is None
