"""Sanity checks for a generated flow.

Reports issues such as expected status codes the API never declares,
unresolved path parameters, throwaway test data and missing login steps,
and suggests fixes where one is obvious.
"""

import logging
import re
from typing import Any, Literal

from pydantic import BaseModel

from api_flow_generator.analyzer.auth import is_login_endpoint
from api_flow_generator.analyzer.base import EndpointInfo
from api_flow_generator.flow import FlowDefinition, GeneratedStep
from api_flow_generator.generator.synthesizer import INVALID_EMAIL

logger = logging.getLogger(__name__)

Severity = Literal["error", "warning", "info"]
IssueType = Literal[
    "invalid_status_code",
    "poor_test_data",
    "duplicate_name",
    "missing_auth",
    "invalid_path_param",
    "wrong_capture_field",
]

SEVERITY_PENALTY = {"error": 10, "warning": 5, "info": 2}

SUGGESTED_VALUES = {
    "username": "testuser",
    "password": "password123",
    "name": "Test User",
    "email": "test@example.com",
}

_RAW_PARAM_RE = re.compile(r"(?<!\{)\{[^{}/]+\}(?!\})")
_VARIABLE_RE = re.compile(r"\{\{[^{}]+\}\}")


class QualityIssue(BaseModel):
    severity: Severity
    type: IssueType
    location: str
    message: str
    suggestion: str
    step_index: int | None = None
    suggested_value: Any = None


class QualityReport(BaseModel):
    total_issues: int
    errors: int
    warnings: int
    infos: int
    issues: list[QualityIssue]
    score: int  # 0-100


class FixSuggestion(BaseModel):
    step_index: int
    field_path: str
    current_value: Any = None
    suggested_value: Any = None
    reason: str


class FlowQualityChecker:
    """Checks a generated flow against the endpoints it was generated from."""

    def __init__(self, endpoints: list[EndpointInfo], flow: FlowDefinition):
        self.endpoints = endpoints
        self.flow = flow
        self._by_operation = {ep.operation_id: ep for ep in endpoints}

    def check(self) -> QualityReport:
        issues: list[QualityIssue] = []
        issues.extend(self._check_status_codes())
        issues.extend(self._check_test_data())
        issues.extend(self._check_step_names())
        issues.extend(self._check_auth_flow())
        issues.extend(self._check_path_parameters())
        issues.extend(self._check_captures())

        counts = {severity: 0 for severity in SEVERITY_PENALTY}
        for issue in issues:
            counts[issue.severity] += 1
        penalty = sum(SEVERITY_PENALTY[s] * n for s, n in counts.items())

        report = QualityReport(
            total_issues=len(issues),
            errors=counts["error"],
            warnings=counts["warning"],
            infos=counts["info"],
            issues=issues,
            score=max(0, 100 - penalty),
        )
        logger.debug("Quality score %d with %d issues", report.score, report.total_issues)
        return report

    def generate_fix_suggestions(self, report: QualityReport) -> list[FixSuggestion]:
        suggestions = []
        for issue in report.issues:
            if issue.step_index is None or issue.suggested_value is None:
                continue
            step = self.flow.steps[issue.step_index]
            field_path = issue.location.split(".", 1)[1]
            suggestions.append(
                FixSuggestion(
                    step_index=issue.step_index,
                    field_path=field_path,
                    current_value=_lookup(step, field_path),
                    suggested_value=issue.suggested_value,
                    reason=issue.message,
                )
            )
        return suggestions

    # -- checks ---------------------------------------------------------------

    def _check_status_codes(self) -> list[QualityIssue]:
        issues = []
        for index, step in enumerate(self.flow.steps):
            status = step.expect.status
            endpoint = self._endpoint_for(step)
            if endpoint is None or not 200 <= status < 300:
                continue
            declared = sorted(
                int(code) for code in endpoint.responses
                if code.isdigit() and code.startswith("2")
            )
            if declared and status not in declared:
                issues.append(QualityIssue(
                    severity="error",
                    type="invalid_status_code",
                    location=f"steps[{index}].expect.status",
                    message=f"Expected status {status} is not declared for {endpoint.operation_id}",
                    suggestion=f"Use {' or '.join(str(c) for c in declared)}",
                    step_index=index,
                    suggested_value=declared[0],
                ))
        return issues

    def _check_test_data(self) -> list[QualityIssue]:
        issues = []
        for index, step in enumerate(self.flow.steps):
            body = step.request.body
            if not isinstance(body, dict):
                continue
            for key, value in body.items():
                if not isinstance(value, str):
                    continue
                location = f"steps[{index}].request.body.{key}"
                problem = _poor_value(key, value)
                if problem:
                    issues.append(QualityIssue(
                        severity="warning",
                        type="poor_test_data",
                        location=location,
                        message=problem,
                        suggestion="Use realistic values such as 'testuser' or 'test@example.com'",
                        step_index=index,
                        suggested_value=_suggested_value(key),
                    ))
        return issues

    def _check_step_names(self) -> list[QualityIssue]:
        issues = []
        seen: set[str] = set()
        for index, step in enumerate(self.flow.steps):
            if step.name in seen:
                issues.append(QualityIssue(
                    severity="warning",
                    type="duplicate_name",
                    location=f"steps[{index}].name",
                    message=f"Duplicate step name: {step.name!r}",
                    suggestion="Give every step a unique name",
                    step_index=index,
                ))
            seen.add(step.name)

            words = re.split(r"[\s-]+", step.name)
            repeated = [w for prev, w in zip(words, words[1:]) if w and w == prev]
            if repeated:
                issues.append(QualityIssue(
                    severity="warning",
                    type="duplicate_name",
                    location=f"steps[{index}].name",
                    message=f"Step name repeats a word: {step.name!r}",
                    suggestion=f"Remove the repeated {repeated[0]!r}",
                    step_index=index,
                    suggested_value=re.sub(r"(\S+)\s+\1\b", r"\1", step.name),
                ))
        return issues

    def _check_auth_flow(self) -> list[QualityIssue]:
        endpoints = [self._endpoint_for(step) for step in self.flow.steps]
        secured = any(ep is not None and ep.requires_auth for ep in endpoints)
        has_login = any(
            _is_login_step(step, ep) for step, ep in zip(self.flow.steps, endpoints)
        )
        if secured and not has_login:
            return [QualityIssue(
                severity="error",
                type="missing_auth",
                location="flow",
                message="Flow calls secured endpoints but has no login step",
                suggestion="Add a login step that captures the token before secured calls",
            )]
        return []

    def _check_path_parameters(self) -> list[QualityIssue]:
        issues = []
        for index, step in enumerate(self.flow.steps):
            path = _VARIABLE_RE.sub("", step.request.path)
            if _RAW_PARAM_RE.search(path):
                issues.append(QualityIssue(
                    severity="error",
                    type="invalid_path_param",
                    location=f"steps[{index}].request.path",
                    message=f"Path has an unresolved parameter: {step.request.path!r}",
                    suggestion="Use a concrete value or a {{variable}} captured by an earlier step",
                    step_index=index,
                ))
        return issues

    def _check_captures(self) -> list[QualityIssue]:
        issues = []
        for index, step in enumerate(self.flow.steps):
            if not step.capture:
                continue
            login = _is_login_step(step, self._endpoint_for(step))
            if login and not any(
                "token" in c.variable_name.lower() or "token" in c.path.lower()
                for c in step.capture
            ):
                issues.append(QualityIssue(
                    severity="warning",
                    type="wrong_capture_field",
                    location=f"steps[{index}].capture",
                    message="Login step should capture a token",
                    suggestion="Capture {variableName: authToken, path: token}",
                    step_index=index,
                ))
            if step.request.method == "POST" and not login and not any(
                c.path == "id" or c.path.endswith(".id") for c in step.capture
            ):
                issues.append(QualityIssue(
                    severity="info",
                    type="wrong_capture_field",
                    location=f"steps[{index}].capture",
                    message="Creation step usually captures the new resource id",
                    suggestion=f"Check that {step.capture[0].path!r} is the right field",
                    step_index=index,
                ))
        return issues

    def _endpoint_for(self, step: GeneratedStep) -> EndpointInfo | None:
        if step.operation_id and step.operation_id in self._by_operation:
            return self._by_operation[step.operation_id]
        normalized = _normalize_path(step.request.path)
        for ep in self.endpoints:
            if ep.method == step.request.method and _normalize_path(ep.path) == normalized:
                return ep
        return None


def _poor_value(key: str, value: str) -> str | None:
    lowered = key.lower()
    if "email" in lowered and value != INVALID_EMAIL and ("@" not in value or len(value) < 5):
        return f"Email looks malformed: {value!r}"
    if lowered in ("username", "password") and len(value) < 3:
        return f"{key} {value!r} is too short"
    if len(value) == 1:
        return f"Test data {value!r} is too simple"
    return None


def _suggested_value(key: str) -> str | None:
    lowered = key.lower()
    if "email" in lowered:
        return SUGGESTED_VALUES["email"]
    return SUGGESTED_VALUES.get(lowered)


def _is_login_step(step: GeneratedStep, endpoint: EndpointInfo | None) -> bool:
    if endpoint is not None and is_login_endpoint(endpoint):
        return True
    path = step.request.path.lower()
    return "/login" in path or "/auth" in path


def _normalize_path(path: str) -> str:
    # /users/{{resourceId}}, /users/{id} and /users/1 all become /users/{}
    path = re.sub(r"\{\{[^{}]+\}\}", "{}", path)
    path = re.sub(r"\{[^{}/]+\}", "{}", path)
    return re.sub(r"/\d+(?=/|$)", "/{}", path)


def _lookup(step: GeneratedStep, field_path: str) -> Any:
    current: Any = step.model_dump()
    for part in field_path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        else:
            return None
    return current
