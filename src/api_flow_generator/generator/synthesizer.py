"""Produces schema-conformant (or deliberately invalid) test values.

Valid values are resolved in priority order: caller-supplied examples, the
schema's own ``examples``, its ``default``, then type-driven generation.
Locale-aware values come from a per-instance ``Faker``.
"""

import logging
import math
from typing import Any

from faker import Faker
from pydantic import ValidationError

from api_flow_generator.config import SynthesizerOptions
from api_flow_generator.schema import (
    ArraySchema,
    BooleanSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    OpaqueSchema,
    SchemaNode,
    StringSchema,
    parse_schema,
)

logger = logging.getLogger(__name__)

MIN_STRING_LENGTH = 3

# Fixed invalid values, so negative cases are reproducible.
INVALID_EMAIL = "invalid-email"
NOT_A_STRING = 123
NOT_A_NUMBER = "not-a-number"
NOT_A_BOOLEAN = "not-a-boolean"
NOT_AN_ARRAY = "not-an-array"
NOT_AN_OBJECT: list = []
NOT_NULL = "not-null"
TYPE_MISMATCH_PLACEHOLDER = None

_NO_EXAMPLE = object()


class DataSynthesizer:
    """Generates test data from JSON Schema nodes."""

    def __init__(
        self,
        options: SynthesizerOptions | None = None,
        faker: Faker | None = None,
        seed: int | None = None,
    ):
        self.options = options or SynthesizerOptions()
        if faker is None:
            faker = Faker(self.options.locale)
            # seed_instance gives this Faker its own Random; None seeds from entropy.
            faker.seed_instance(seed)
        elif seed is not None:
            faker.seed_instance(seed)
        self.faker = faker

    # -- public API -----------------------------------------------------------

    def synthesize(
        self,
        schema: SchemaNode | dict | None,
        examples: dict[str, Any] | None = None,
        field_name: str | None = None,
    ) -> Any:
        """Return a value that satisfies ``schema``. Never raises."""
        node = self._coerce(schema)

        if self.options.use_examples and examples:
            value = self._extract_example(examples)
            if value is not _NO_EXAMPLE:
                return value

        return self._synthesize_node(node, field_name)

    def synthesize_invalid(self, schema: SchemaNode | dict | None) -> Any:
        """Return a value that violates ``schema``.

        Violates the first constraint found; without one, returns a value of
        the wrong type. Opaque schemas yield ``TYPE_MISMATCH_PLACEHOLDER``.
        """
        node = self._coerce(schema)

        if isinstance(node, StringSchema):
            if node.format == "email":
                return INVALID_EMAIL
            if node.min_length:
                return "x" * (node.min_length - 1)
            if node.max_length is not None:
                return "x" * (node.max_length + 1)
            return NOT_A_STRING

        if isinstance(node, NumberSchema):
            if node.minimum is not None:
                return node.minimum - 1
            if node.maximum is not None:
                return node.maximum + 1
            return NOT_A_NUMBER

        if isinstance(node, BooleanSchema):
            return NOT_A_BOOLEAN

        if isinstance(node, ArraySchema):
            if node.min_items:
                return []
            return NOT_AN_ARRAY

        if isinstance(node, ObjectSchema):
            return list(NOT_AN_OBJECT)

        if isinstance(node, NullSchema):
            return NOT_NULL

        return TYPE_MISMATCH_PLACEHOLDER

    # -- resolution -----------------------------------------------------------

    def _coerce(self, schema: SchemaNode | dict | None) -> SchemaNode:
        try:
            return parse_schema(schema)
        except ValidationError as exc:
            logger.warning("Unusable schema, treating as opaque: %s", exc)
            return OpaqueSchema()

    def _synthesize_node(self, node: SchemaNode, field_name: str | None = None) -> Any:
        if self.options.use_examples and node.examples:
            return node.examples[0]
        if self.options.use_defaults and node.has_default:
            return node.default
        return self._generate_by_type(node, field_name)

    def _extract_example(self, examples: dict[str, Any]) -> Any:
        """First entry of an OpenAPI examples map, unwrapping ``{value: ...}``."""
        example = next(iter(examples.values()))
        if isinstance(example, dict) and "value" in example:
            return example["value"]
        if example is None:
            return _NO_EXAMPLE
        return example

    def _generate_by_type(self, node: SchemaNode, field_name: str | None) -> Any:
        if isinstance(node, StringSchema):
            return self._generate_string(node, field_name)
        if isinstance(node, NumberSchema):
            return self._generate_number(node)
        if isinstance(node, BooleanSchema):
            return self._generate_boolean(node)
        if isinstance(node, ArraySchema):
            return self._generate_array(node)
        if isinstance(node, ObjectSchema):
            return self._generate_object(node)
        if isinstance(node, NullSchema):
            return None
        return TYPE_MISMATCH_PLACEHOLDER

    # -- per-type generation --------------------------------------------------

    def _generate_string(self, node: StringSchema, field_name: str | None) -> Any:
        if self.options.use_enums and node.enum:
            return node.enum[0]

        value = self._format_value(node.format)
        if value is None and field_name:
            value = self._hinted_value(field_name)
        if value is None:
            value = self.faker.word()

        return _fit_length(value, node.min_length, node.max_length)

    def _format_value(self, fmt: str | None) -> str | None:
        generators = {
            "email": self.faker.email,
            "uri": self.faker.url,
            "url": self.faker.url,
            "uuid": self.faker.uuid4,
            "date": self.faker.date,
            "date-time": self.faker.iso8601,
            "time": self.faker.time,
            "ipv4": self.faker.ipv4,
            "ipv6": self.faker.ipv6,
            "hostname": self.faker.hostname,
            "phone": self.faker.phone_number,
        }
        generate = generators.get(fmt or "")
        return str(generate()) if generate else None

    def _hinted_value(self, field_name: str) -> str | None:
        name = field_name.lower()
        if "username" in name or name == "user":
            return self.faker.user_name()
        if "password" in name or "pwd" in name:
            return self.faker.password(length=12)
        if "email" in name or "mail" in name:
            return self.faker.email()
        if name == "name" or "fullname" in name:
            return self.faker.name()
        if name == "title" or "subject" in name:
            return self.faker.sentence(nb_words=3).rstrip(".。")
        if "description" in name or "desc" in name:
            return self.faker.text(max_nb_chars=60)
        if "address" in name:
            return self.faker.address().replace("\n", " ")
        if "phone" in name or "tel" in name:
            return self.faker.phone_number()
        return None

    def _generate_number(self, node: NumberSchema) -> int | float:
        if self.options.use_enums and node.enum:
            return node.enum[0]

        low, high = _effective_bounds(node)
        if low is not None:
            value = low
        elif high is not None:
            value = high
        else:
            value = 1

        if node.multiple_of:
            step = node.multiple_of
            candidate = math.ceil(value / step) * step
            if high is not None and candidate > high:
                candidate = math.floor(high / step) * step
            value = round(candidate, 10)

        if node.type == "integer":
            # Round toward the inside of the allowed range.
            if low is None and high is not None:
                return int(math.floor(value))
            return int(math.ceil(value))
        return value

    def _generate_boolean(self, node: BooleanSchema) -> Any:
        if self.options.use_enums and node.enum:
            return node.enum[0]
        return True

    def _generate_array(self, node: ArraySchema) -> list:
        if node.items is None:
            return []
        count = node.min_items if node.min_items is not None else 1
        if node.max_items is not None:
            count = min(count, node.max_items)
        return [self._synthesize_node(node.items) for _ in range(count)]

    def _generate_object(self, node: ObjectSchema) -> dict:
        if not node.properties:
            return {}

        required = set(node.required)
        obj = {}
        for name, prop in node.properties.items():
            if name in required:
                obj[name] = self._synthesize_node(prop, field_name=name)
            elif self.options.use_defaults and prop.has_default:
                obj[name] = prop.default
        return obj


def _effective_bounds(node: NumberSchema) -> tuple[int | float | None, int | float | None]:
    """Inclusive bounds after applying exclusive flags (one unit inward)."""
    low, high = node.minimum, node.maximum

    if node.exclusive_minimum is True and low is not None:
        low = low + 1
    elif _is_number(node.exclusive_minimum):
        bound = node.exclusive_minimum + 1
        low = bound if low is None else max(low, bound)

    if node.exclusive_maximum is True and high is not None:
        high = high - 1
    elif _is_number(node.exclusive_maximum):
        bound = node.exclusive_maximum - 1
        high = bound if high is None else min(high, bound)

    return low, high


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _fit_length(value: str, min_length: int | None, max_length: int | None) -> str:
    """Pad by repetition up to the length floor, then cap at ``max_length``."""
    floor = max(min_length or 0, MIN_STRING_LENGTH)
    if not value:
        value = "x"
    if len(value) < floor:
        value = (value * (floor // len(value) + 1))[:floor]
    if max_length is not None and max_length >= (min_length or 0):
        value = value[:max_length]
    return value
