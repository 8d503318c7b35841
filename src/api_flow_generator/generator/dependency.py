"""Infers CRUD chains between endpoints from path conventions.

A resource is created by ``POST /<resource>`` and then read, updated and
deleted through ``/<resource>/{id}`` paths, e.g.
POST /users -> GET /users/{id} -> PUT /users/{id} -> DELETE /users/{id}.
"""

import logging
from typing import Literal

from pydantic import BaseModel

from api_flow_generator.analyzer.base import AuthFlowInfo, EndpointInfo
from api_flow_generator.flow import CaptureRule, GeneratedStep, StepExpect, StepRequest
from api_flow_generator.generator.naming import VerbTable, ZH_TW_VERBS
from api_flow_generator.generator.synthesizer import DataSynthesizer

logger = logging.getLogger(__name__)

RESOURCE_ID_VARIABLE = "resourceId"
AUTH_TOKEN_VARIABLE = "authToken"
AUTH_PATH_HINTS = ("login", "auth")

METHOD_PRECEDENCE = ("GET", "PUT", "PATCH", "DELETE")

EdgeType = Literal["requires", "modifies", "deletes"]

EDGE_TYPES: dict[str, EdgeType] = {
    "GET": "requires",
    "PUT": "modifies",
    "PATCH": "modifies",
    "DELETE": "deletes",
}


class DependencyNode(BaseModel):
    operation_id: str
    method: str
    path: str
    resource_type: str


class DependencyEdge(BaseModel):
    source: str  # operationId of the creation endpoint
    target: str
    type: EdgeType
    variable: str | None = None  # first path parameter of the target, for diagnostics


class DependencyGraph(BaseModel):
    nodes: list[DependencyNode] = []
    edges: list[DependencyEdge] = []


def resource_type(path: str) -> str:
    """First path segment that is not a ``{param}``, else ``"unknown"``."""
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            continue
        return segment
    return "unknown"


class DependencyResolver:
    """Builds the happy-path step sequence for every creatable resource."""

    def __init__(
        self,
        synthesizer: DataSynthesizer | None = None,
        verb_table: VerbTable | None = None,
        auth_flow: AuthFlowInfo | None = None,
    ):
        self.synthesizer = synthesizer or DataSynthesizer()
        self.verb_table = verb_table or ZH_TW_VERBS
        self.auth_flow = auth_flow

    def analyze_dependencies(self, endpoints: list[EndpointInfo]) -> DependencyGraph:
        nodes = [
            DependencyNode(
                operation_id=ep.operation_id,
                method=ep.method,
                path=ep.path,
                resource_type=resource_type(ep.path),
            )
            for ep in endpoints
        ]

        edges = []
        for source, node in zip(endpoints, nodes):
            if not source.is_creation:
                continue
            for target, other in zip(endpoints, nodes):
                if target is source or other.resource_type != node.resource_type:
                    continue
                if not target.path_parameters or target.method not in EDGE_TYPES:
                    continue
                edges.append(
                    DependencyEdge(
                        source=source.operation_id,
                        target=target.operation_id,
                        type=EDGE_TYPES[target.method],
                        variable=target.path_parameters[0],
                    )
                )

        return DependencyGraph(nodes=nodes, edges=edges)

    def resolve_execution_order(self, endpoints: list[EndpointInfo]) -> list[GeneratedStep]:
        steps: list[GeneratedStep] = []

        for resource, group in self._group_by_resource(endpoints).items():
            create = next((ep for ep in group if ep.is_creation), None)
            if create is None:
                logger.debug("Skipping resource %r: no creation endpoint", resource)
                continue

            steps.append(self._creation_step(create))
            for method in METHOD_PRECEDENCE:
                dependent = next(
                    (ep for ep in group if ep.method == method and ep.path_parameters),
                    None,
                )
                if dependent is not None:
                    steps.append(self._dependent_step(dependent))

        return steps

    # -- step builders --------------------------------------------------------

    def _creation_step(self, endpoint: EndpointInfo) -> GeneratedStep:
        body = None
        if endpoint.request_schema is not None:
            body = self.synthesizer.synthesize(endpoint.request_schema, endpoint.examples)

        return GeneratedStep(
            name=self._step_name(endpoint),
            operation_id=endpoint.operation_id,
            request=StepRequest(method=endpoint.method, path=endpoint.path, body=body),
            expect=self._expect(endpoint),
            capture=[self._capture_rule(endpoint)],
        )

    def _dependent_step(self, endpoint: EndpointInfo) -> GeneratedStep:
        body = None
        if endpoint.method in ("PUT", "PATCH") and endpoint.request_schema is not None:
            body = self.synthesizer.synthesize(endpoint.request_schema)

        return GeneratedStep(
            name=self._step_name(endpoint),
            operation_id=endpoint.operation_id,
            request=StepRequest(
                method=endpoint.method,
                path=endpoint.interpolated_path(RESOURCE_ID_VARIABLE),
                body=body,
            ),
            expect=self._expect(endpoint),
        )

    def _capture_rule(self, endpoint: EndpointInfo) -> CaptureRule:
        if self.auth_flow and self.auth_flow.operation_id == endpoint.operation_id:
            return CaptureRule(variable_name=AUTH_TOKEN_VARIABLE, path=self.auth_flow.token_field)
        if _is_auth_path(endpoint.path):
            return CaptureRule(variable_name=AUTH_TOKEN_VARIABLE, path="token")
        return CaptureRule(variable_name=RESOURCE_ID_VARIABLE, path="id")

    def _expect(self, endpoint: EndpointInfo) -> StepExpect:
        return StepExpect(status=endpoint.success_status(), body_fields=endpoint.response_fields())

    def _step_name(self, endpoint: EndpointInfo) -> str:
        return self.verb_table.step_name(endpoint.summary, endpoint.operation_id, endpoint.method)

    def _group_by_resource(self, endpoints: list[EndpointInfo]) -> dict[str, list[EndpointInfo]]:
        """Group endpoints by resource type, keeping first-seen order."""
        groups: dict[str, list[EndpointInfo]] = {}
        for ep in endpoints:
            groups.setdefault(resource_type(ep.path), []).append(ep)
        return groups


def _is_auth_path(path: str) -> bool:
    lowered = path.lower()
    return any(hint in lowered for hint in AUTH_PATH_HINTS)
