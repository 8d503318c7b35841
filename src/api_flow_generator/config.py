"""Generator configuration.

Options are plain pydantic models; environment variables only supply defaults.
An unsupported ``API_FLOW_LOCALE`` fails validation like an explicit value would.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field

Locale = Literal["zh_TW", "en_US"]

DEFAULT_BASE_URL = os.getenv("API_FLOW_BASE_URL", "http://localhost:3000")


def _default_locale() -> str:
    return os.getenv("API_FLOW_LOCALE", "zh_TW")


class SynthesizerOptions(BaseModel):
    """Which value sources the data synthesizer may use, and in which locale."""

    use_examples: bool = True
    use_defaults: bool = True
    use_enums: bool = True
    locale: Locale = Field(default_factory=_default_locale, validate_default=True)


class GeneratorOptions(BaseModel):
    """Category toggles and endpoint allow-list for a generated suite."""

    include_success_cases: bool = True
    include_error_cases: bool = True
    include_missing_fields: bool = True
    include_invalid_formats: bool = True
    include_auth_errors: bool = True
    include_edge_cases: bool = True
    endpoints: list[str] = Field(default_factory=list)  # operationId / "METHOD /path" / "/path"
