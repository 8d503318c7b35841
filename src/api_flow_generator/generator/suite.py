"""Composes the individual generators into one flow document."""

import logging
from fnmatch import fnmatchcase

from api_flow_generator.analyzer.auth import detect_authentication_flow
from api_flow_generator.analyzer.base import AuthFlowInfo, EndpointInfo, SpecAnalyzer
from api_flow_generator.config import DEFAULT_BASE_URL, GeneratorOptions, SynthesizerOptions
from api_flow_generator.flow import FlowDefinition, GeneratedStep, SuiteSummary
from api_flow_generator.generator.dependency import DependencyResolver
from api_flow_generator.generator.edge_case import EdgeCaseGenerator
from api_flow_generator.generator.error_case import ErrorCaseGenerator
from api_flow_generator.generator.naming import VERB_TABLES
from api_flow_generator.generator.synthesizer import DataSynthesizer

logger = logging.getLogger(__name__)


def _matches(endpoint: EndpointInfo, pattern: str) -> bool:
    if pattern == endpoint.operation_id:
        return True
    if " " in pattern:
        method, _, path = pattern.partition(" ")
        return endpoint.method == method.upper() and fnmatchcase(endpoint.path, path.strip())
    if pattern.startswith("/"):
        return fnmatchcase(endpoint.path, pattern)
    return False


def filter_endpoints(endpoints: list[EndpointInfo], patterns: list[str] | None) -> list[EndpointInfo]:
    """Keep endpoints matching any pattern; an empty allow-list keeps everything.

    Patterns: ``operationId``, ``"METHOD /path"`` or ``"/path"`` (any method).
    Paths accept shell-style wildcards, e.g. ``/users/*``.
    """
    if not patterns:
        return list(endpoints)
    return [ep for ep in endpoints if any(_matches(ep, p) for p in patterns)]


class TestSuiteGenerator:
    """Generates a complete flow: happy path, then per-endpoint negative and edge cases."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        synthesizer_options: SynthesizerOptions | None = None,
        seed: int | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ):
        self.synthesizer_options = synthesizer_options or SynthesizerOptions()
        self.seed = seed
        self.base_url = base_url

    def generate(
        self,
        endpoints: list[EndpointInfo],
        options: GeneratorOptions | None = None,
        auth_flow: AuthFlowInfo | None = None,
    ) -> FlowDefinition:
        options = options or GeneratorOptions()
        targets = filter_endpoints(endpoints, options.endpoints)
        logger.debug("Selected %d of %d endpoints", len(targets), len(endpoints))

        success: list[GeneratedStep] = []
        errors: list[GeneratedStep] = []
        edges: list[GeneratedStep] = []
        per_endpoint: list[GeneratedStep] = []

        if options.include_success_cases:
            resolver = DependencyResolver(
                synthesizer=self._synthesizer(),
                verb_table=VERB_TABLES[self.synthesizer_options.locale],
                auth_flow=auth_flow,
            )
            success = resolver.resolve_execution_order(targets)

        error_generator = ErrorCaseGenerator(
            include_missing_fields=options.include_missing_fields,
            include_invalid_formats=options.include_invalid_formats,
            include_auth_errors=options.include_auth_errors,
            synthesizer=self._synthesizer(use_examples=False),
        )
        edge_generator = EdgeCaseGenerator(synthesizer=self._synthesizer())

        for endpoint in targets:
            if options.include_error_cases:
                endpoint_errors = error_generator.generate(endpoint)
                errors.extend(endpoint_errors)
                per_endpoint.extend(endpoint_errors)
            if options.include_edge_cases:
                endpoint_edges = edge_generator.generate_edge_cases(endpoint)
                edges.extend(endpoint_edges)
                per_endpoint.extend(endpoint_edges)

        steps = success + per_endpoint
        summary = SuiteSummary(
            endpoints=[ep.operation_id for ep in targets],
            total_tests=len(steps),
            success_tests=len(success),
            error_tests=len(errors),
            edge_tests=len(edges),
        )
        logger.info(
            "Generated %d tests for %d endpoints (%d success, %d error, %d edge)",
            summary.total_tests, len(targets),
            summary.success_tests, summary.error_tests, summary.edge_tests,
        )

        return FlowDefinition(
            name="Generated API test suite",
            description=f"Test cases for {len(targets)} endpoints",
            base_url=self.base_url,
            steps=steps,
            summary=summary,
        )

    def generate_from_analyzer(
        self,
        analyzer: SpecAnalyzer,
        options: GeneratorOptions | None = None,
    ) -> FlowDefinition:
        """Pull endpoints (and the login flow, if offered) from an OpenAPI analyzer."""
        endpoints = analyzer.extract_endpoints()
        get_auth_flow = getattr(analyzer, "get_authentication_flow", None)
        if get_auth_flow is not None:
            auth_flow = get_auth_flow()
        else:
            auth_flow = detect_authentication_flow(endpoints)
        return self.generate(endpoints, options, auth_flow=auth_flow)

    def _synthesizer(self, use_examples: bool | None = None) -> DataSynthesizer:
        options = self.synthesizer_options
        if use_examples is not None:
            options = options.model_copy(update={"use_examples": use_examples})
        return DataSynthesizer(options, seed=self.seed)
