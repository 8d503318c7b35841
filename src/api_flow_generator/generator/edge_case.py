"""Boundary test cases for constrained request fields."""

from typing import Any, NamedTuple

from api_flow_generator.analyzer.base import EndpointInfo
from api_flow_generator.flow import GeneratedStep, StepExpect, StepRequest
from api_flow_generator.generator.dependency import RESOURCE_ID_VARIABLE
from api_flow_generator.generator.synthesizer import DataSynthesizer
from api_flow_generator.schema import (
    NumberSchema,
    SchemaNode,
    StringSchema,
    object_properties,
    required_fields,
)

BOUNDARY_FILL = "x"


class BoundaryProbe(NamedTuple):
    label: str
    value: Any
    expect_success: bool


class EdgeCaseGenerator:
    """Generates one step per boundary of every constrained top-level field."""

    def __init__(self, synthesizer: DataSynthesizer | None = None):
        self.synthesizer = synthesizer or DataSynthesizer()

    def generate_edge_cases(self, endpoint: EndpointInfo) -> list[GeneratedStep]:
        properties = object_properties(endpoint.request_schema)
        steps = []
        for field, schema in properties.items():
            for probe in self._field_probes(schema):
                steps.append(self._probe_step(endpoint, field, probe))
        return steps

    def _field_probes(self, schema: SchemaNode) -> list[BoundaryProbe]:
        probes = []
        if isinstance(schema, StringSchema):
            if schema.max_length is not None:
                probes.append(BoundaryProbe("max length", BOUNDARY_FILL * schema.max_length, True))
                probes.append(
                    BoundaryProbe("exceeds maximum length", BOUNDARY_FILL * (schema.max_length + 1), False)
                )
            if schema.min_length is not None:
                probes.append(BoundaryProbe("min length", BOUNDARY_FILL * schema.min_length, True))
        elif isinstance(schema, NumberSchema):
            probes.extend(_bound_probes("minimum", schema.minimum, schema.exclusive_minimum))
            probes.extend(_bound_probes("maximum", schema.maximum, schema.exclusive_maximum))
        return probes

    def _probe_step(self, endpoint: EndpointInfo, field: str, probe: BoundaryProbe) -> GeneratedStep:
        properties = dict(object_properties(endpoint.request_schema))
        for name in required_fields(endpoint.request_schema):
            properties.setdefault(name, None)

        body = {}
        for name, schema in properties.items():
            if name == field:
                body[name] = probe.value
            else:
                body[name] = self.synthesizer.synthesize(schema, field_name=name)

        status = endpoint.success_status() if probe.expect_success else 400
        return GeneratedStep(
            name=f"{endpoint.label()} - {field} {probe.label}",
            operation_id=endpoint.operation_id,
            request=StepRequest(
                method=endpoint.method,
                path=endpoint.interpolated_path(RESOURCE_ID_VARIABLE),
                body=body,
            ),
            expect=StepExpect(status=status),
        )


def _bound_probes(kind: str, bound: int | float | None, exclusive: bool | int | float | None) -> list[BoundaryProbe]:
    """Probe an inclusive bound expecting success, an excluded one expecting 400.

    Handles both the boolean (``exclusiveMinimum: true``) and the numeric
    (``exclusiveMinimum: 5``) forms.
    """
    if bound is not None:
        if exclusive is True:
            return [BoundaryProbe(f"exclusive {kind} value", bound, False)]
        return [BoundaryProbe(f"{kind} value", bound, True)]
    if isinstance(exclusive, (int, float)) and not isinstance(exclusive, bool):
        return [BoundaryProbe(f"exclusive {kind} value", exclusive, False)]
    return []
