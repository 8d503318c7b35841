"""Flow document models produced by the generators.

The shape matches the flow runtime's step schema: camelCase keys,
``{{variable}}`` tokens in paths and plain JSON bodies.
"""

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FlowModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CaptureRule(_FlowModel):
    """Extract ``path`` from the response body into ``variable_name``."""

    model_config = ConfigDict(frozen=True)

    variable_name: str
    path: str


class StepRequest(_FlowModel):
    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    headers: dict[str, str] = {}
    body: Any = None


class StepExpect(_FlowModel):
    model_config = ConfigDict(frozen=True)

    status: int
    body_fields: list[str] = []


class GeneratedStep(_FlowModel):
    """One generated test case."""

    model_config = ConfigDict(frozen=True)

    name: str
    operation_id: str | None = None
    request: StepRequest
    expect: StepExpect
    capture: list[CaptureRule] = []


class SuiteSummary(_FlowModel):
    endpoints: list[str] = []
    total_tests: int = 0
    success_tests: int = 0
    error_tests: int = 0
    edge_tests: int = 0


class FlowDefinition(_FlowModel):
    name: str
    description: str = ""
    version: str = "1.0.0"
    base_url: str
    steps: list[GeneratedStep] = Field(default_factory=list)
    summary: SuiteSummary = Field(default_factory=SuiteSummary)

    def to_dict(self) -> dict:
        """Runtime representation: camelCase keys, unset step fields dropped.

        Only step and request level ``None`` values are removed; ``null``
        values inside request bodies are kept.
        """
        data = self.model_dump(mode="json", by_alias=True)
        for step in data["steps"]:
            _drop_none(step)
            _drop_none(step["request"])
        return data

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), allow_unicode=True, sort_keys=False)


def _drop_none(data: dict) -> None:
    for key in [k for k, v in data.items() if v is None]:
        del data[key]
