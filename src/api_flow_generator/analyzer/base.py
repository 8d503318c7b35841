"""Endpoint models handed over by the OpenAPI analyzer.

The analyzer that loads and parses OpenAPI documents lives outside this
package; it converts every operation into an ``EndpointInfo`` and the
generators only ever read these records.
"""

import re
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from api_flow_generator.schema import JSONSchema, ObjectSchema

PATH_PARAM_RE = re.compile(r"\{([^{}/]+)\}")

DEFAULT_SUCCESS_STATUS = {
    "POST": 201,
    "GET": 200,
    "PUT": 200,
    "PATCH": 200,
    "DELETE": 204,
}


class _AnalyzerModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParameterInfo(_AnalyzerModel):
    """A single operation parameter (path, query, header or cookie)."""

    name: str
    location: str = Field(default="query", alias="in")  # path / query / header / cookie
    required: bool = False
    schema_: JSONSchema | None = Field(default=None, alias="schema")
    description: str = ""


class EndpointInfo(_AnalyzerModel):
    """One (method, path) operation with all metadata the generators need."""

    method: str  # GET / POST / PUT / PATCH / DELETE
    path: str  # /users/{id}
    operation_id: str
    summary: str | None = None
    description: str | None = None
    tags: list[str] = []
    request_schema: JSONSchema | None = None
    responses: dict[str, JSONSchema | None] = {}  # {status_code: schema}
    security: list[dict[str, list[str]]] = []
    parameters: list[ParameterInfo] = []
    examples: dict[str, Any] | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("responses", mode="before")
    @classmethod
    def _stringify_status_codes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(code): schema for code, schema in value.items()}
        return value

    @property
    def path_parameters(self) -> list[str]:
        return PATH_PARAM_RE.findall(self.path)

    @property
    def is_creation(self) -> bool:
        """POST on a collection path (no path parameter)."""
        return self.method == "POST" and not self.path_parameters

    @property
    def requires_auth(self) -> bool:
        return bool(self.security)

    def success_status(self) -> int:
        """Smallest declared 2xx status code, else the method's conventional one."""
        codes = sorted(
            int(code) for code in self.responses
            if code.isdigit() and code.startswith("2")
        )
        if codes:
            return codes[0]
        return DEFAULT_SUCCESS_STATUS.get(self.method, 200)

    def success_response_schema(self) -> JSONSchema | None:
        return self.responses.get(str(self.success_status()))

    def response_fields(self) -> list[str]:
        """Required top-level fields of the success response, if declared."""
        schema = self.success_response_schema()
        if isinstance(schema, ObjectSchema):
            return list(schema.required)
        return []

    def interpolated_path(self, variable: str = "resourceId") -> str:
        """Replace path parameters with ``{{...}}`` runtime variables.

        The first parameter becomes ``{{variable}}``; any further parameter
        keeps its own name, e.g. ``/users/{id}/posts/{postId}`` becomes
        ``/users/{{resourceId}}/posts/{{postId}}``.
        """
        seen = 0

        def _replace(match: re.Match) -> str:
            nonlocal seen
            seen += 1
            name = variable if seen == 1 else match.group(1)
            return "{{" + name + "}}"

        return PATH_PARAM_RE.sub(_replace, self.path)

    def label(self) -> str:
        return self.summary or self.operation_id


class AuthFlowInfo(_AnalyzerModel):
    """The login operation and where its token lives in the response."""

    operation_id: str
    credential_fields: list[str] = ["username", "password"]
    token_field: str = "token"


@runtime_checkable
class SpecAnalyzer(Protocol):
    """What the generators need from the external OpenAPI analyzer.

    ``get_authentication_flow`` is optional; callers check for it with
    ``getattr`` before using it.
    """

    def extract_endpoints(self) -> list[EndpointInfo]:
        ...
