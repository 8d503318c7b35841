"""Negative test cases: missing fields, invalid values and missing auth."""

from typing import Any

from api_flow_generator.analyzer.base import EndpointInfo
from api_flow_generator.config import SynthesizerOptions
from api_flow_generator.flow import GeneratedStep, StepExpect, StepRequest
from api_flow_generator.generator.dependency import RESOURCE_ID_VARIABLE
from api_flow_generator.generator.synthesizer import TYPE_MISMATCH_PLACEHOLDER, DataSynthesizer
from api_flow_generator.schema import object_properties, required_fields

VALIDATION_ERROR_STATUS = 400
UNAUTHORIZED_STATUS = 401


class ErrorCaseGenerator:
    """Generates negative test steps for a single endpoint."""

    def __init__(
        self,
        include_missing_fields: bool = True,
        include_invalid_formats: bool = True,
        include_auth_errors: bool = True,
        synthesizer: DataSynthesizer | None = None,
    ):
        self.include_missing_fields = include_missing_fields
        self.include_invalid_formats = include_invalid_formats
        self.include_auth_errors = include_auth_errors
        # Negative bodies are schema-driven; examples could mask the violation.
        self.synthesizer = synthesizer or DataSynthesizer(SynthesizerOptions(use_examples=False))

    def generate(self, endpoint: EndpointInfo) -> list[GeneratedStep]:
        return (
            self.generate_missing_field_cases(endpoint)
            + self.generate_format_validation_cases(endpoint)
            + self.generate_auth_error_cases(endpoint)
        )

    def generate_missing_field_cases(self, endpoint: EndpointInfo) -> list[GeneratedStep]:
        """One step per required field, with that field left out of the body."""
        if not self.include_missing_fields:
            return []

        steps = []
        for field in required_fields(endpoint.request_schema):
            body = self._body(endpoint, exclude=field)
            steps.append(
                self._step(endpoint, f"missing {field}", body, VALIDATION_ERROR_STATUS)
            )
        return steps

    def generate_format_validation_cases(self, endpoint: EndpointInfo) -> list[GeneratedStep]:
        """One step per property that has an invalid counterpart."""
        if not self.include_invalid_formats:
            return []

        steps = []
        for field, schema in object_properties(endpoint.request_schema).items():
            invalid = self.synthesizer.synthesize_invalid(schema)
            if invalid is TYPE_MISMATCH_PLACEHOLDER:
                continue
            body = self._body(endpoint, override=(field, invalid))
            steps.append(
                self._step(endpoint, f"invalid {field}", body, VALIDATION_ERROR_STATUS)
            )
        return steps

    def generate_auth_error_cases(self, endpoint: EndpointInfo) -> list[GeneratedStep]:
        """A single unauthenticated request when the endpoint declares security."""
        if not self.include_auth_errors or not endpoint.requires_auth:
            return []
        return [self._step(endpoint, "no auth", None, UNAUTHORIZED_STATUS)]

    def _body(
        self,
        endpoint: EndpointInfo,
        exclude: str | None = None,
        override: tuple[str, Any] | None = None,
    ) -> dict:
        properties = dict(object_properties(endpoint.request_schema))
        # Required names without a declared property still belong in the body.
        for name in required_fields(endpoint.request_schema):
            properties.setdefault(name, None)

        body = {}
        for name, schema in properties.items():
            if name == exclude:
                continue
            if override and name == override[0]:
                body[name] = override[1]
            else:
                body[name] = self.synthesizer.synthesize(schema, field_name=name)
        return body

    def _step(self, endpoint: EndpointInfo, case: str, body: Any, status: int) -> GeneratedStep:
        return GeneratedStep(
            name=f"{endpoint.label()} - {case}",
            operation_id=endpoint.operation_id,
            request=StepRequest(
                method=endpoint.method,
                path=endpoint.interpolated_path(RESOURCE_ID_VARIABLE),
                body=body,
            ),
            expect=StepExpect(status=status),
        )
