"""Login endpoint detection for analyzers without ``get_authentication_flow``."""

import logging

from api_flow_generator.analyzer.base import AuthFlowInfo, EndpointInfo
from api_flow_generator.schema import StringSchema, object_properties

logger = logging.getLogger(__name__)

LOGIN_OPERATION_HINTS = ("login", "signin", "auth")
LOGIN_SUMMARY_HINTS = ("登入", "login")
LOGIN_PATH_HINTS = ("/auth/", "/login")
CREDENTIAL_HINTS = ("username", "email", "account", "password", "pwd")
TOKEN_FIELDS = ("token", "accessToken", "access_token", "jwt")


def is_login_endpoint(endpoint: EndpointInfo) -> bool:
    operation_id = endpoint.operation_id.lower()
    summary = (endpoint.summary or "").lower()
    path = endpoint.path.lower()
    return (
        any(hint in operation_id for hint in LOGIN_OPERATION_HINTS)
        or any(hint in summary for hint in LOGIN_SUMMARY_HINTS)
        or any(hint in path for hint in LOGIN_PATH_HINTS)
    )


def detect_authentication_flow(endpoints: list[EndpointInfo]) -> AuthFlowInfo | None:
    """Return the first endpoint that looks like a login operation, if any."""
    login = next((ep for ep in endpoints if is_login_endpoint(ep)), None)
    if login is None:
        return None

    flow = AuthFlowInfo(
        operation_id=login.operation_id,
        credential_fields=_credential_fields(login),
        token_field=_token_field(login),
    )
    logger.debug("Detected login endpoint %s %s", login.method, login.path)
    return flow


def _credential_fields(endpoint: EndpointInfo) -> list[str]:
    fields = [
        name for name, schema in object_properties(endpoint.request_schema).items()
        if isinstance(schema, StringSchema)
        and any(hint in name.lower() for hint in CREDENTIAL_HINTS)
    ]
    return fields or ["username", "password"]


def _token_field(endpoint: EndpointInfo) -> str:
    properties = object_properties(endpoint.success_response_schema())
    for name in TOKEN_FIELDS:
        if name in properties:
            return name
    return "token"
