from api_flow_generator.analyzer.base import EndpointInfo
from api_flow_generator.generator.error_case import ErrorCaseGenerator
from api_flow_generator.generator.synthesizer import INVALID_EMAIL, NOT_A_NUMBER, DataSynthesizer

USER_SCHEMA = {
    "type": "object",
    "properties": {
        "username": {"type": "string", "minLength": 3},
        "email": {"type": "string", "format": "email"},
        "age": {"type": "integer", "minimum": 18},
    },
    "required": ["username", "email"],
}


def _make_endpoint(**overrides) -> EndpointInfo:
    defaults = dict(
        method="POST",
        path="/users",
        operation_id="createUser",
        summary="Create user",
    )
    defaults.update(overrides)
    return EndpointInfo(**defaults)


def _generator(**kwargs):
    return ErrorCaseGenerator(synthesizer=DataSynthesizer(seed=3), **kwargs)


class TestConfiguration:
    def test_all_families_enabled_by_default(self):
        gen = ErrorCaseGenerator()
        assert gen.include_missing_fields is True
        assert gen.include_invalid_formats is True
        assert gen.include_auth_errors is True

    def test_default_synthesizer_ignores_examples(self):
        assert ErrorCaseGenerator().synthesizer.options.use_examples is False

    def test_families_can_be_disabled_independently(self):
        gen = _generator(include_missing_fields=True, include_invalid_formats=False, include_auth_errors=False)
        ep = _make_endpoint(request_schema=USER_SCHEMA, security=[{"bearerAuth": []}])
        assert len(gen.generate_missing_field_cases(ep)) == 2
        assert gen.generate_format_validation_cases(ep) == []
        assert gen.generate_auth_error_cases(ep) == []


class TestMissingFieldCases:
    def test_one_step_per_required_field(self):
        ep = _make_endpoint(request_schema={
            "type": "object",
            "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
            "required": ["a", "b"],
        })
        steps = _generator().generate_missing_field_cases(ep)

        assert len(steps) == 2
        assert "a" not in steps[0].request.body and "b" in steps[0].request.body
        assert "b" not in steps[1].request.body and "a" in steps[1].request.body
        assert all(s.expect.status == 400 for s in steps)
        assert "missing a" in steps[0].name

    def test_required_without_declared_properties(self):
        ep = _make_endpoint(request_schema={"type": "object", "required": ["a", "b"]})
        steps = _generator().generate_missing_field_cases(ep)
        assert [set(s.request.body) for s in steps] == [{"b"}, {"a"}]

    def test_no_steps_without_required(self):
        ep = _make_endpoint(request_schema={"type": "object", "properties": {"a": {"type": "string"}}})
        assert _generator().generate_missing_field_cases(ep) == []

    def test_no_steps_without_request_schema(self):
        assert _generator().generate_missing_field_cases(_make_endpoint()) == []


class TestFormatValidationCases:
    def test_invalid_values_per_property(self):
        steps = _generator().generate_format_validation_cases(_make_endpoint(request_schema=USER_SCHEMA))
        bodies = {s.name.rsplit(" ", 1)[-1]: s.request.body for s in steps}

        assert set(bodies) == {"username", "email", "age"}
        assert bodies["username"]["username"] == "xx"
        assert bodies["email"]["email"] == INVALID_EMAIL
        assert bodies["age"]["age"] == 17
        assert all(s.expect.status == 400 for s in steps)

    def test_other_required_fields_stay_valid(self):
        steps = _generator().generate_format_validation_cases(_make_endpoint(request_schema=USER_SCHEMA))
        email_step = next(s for s in steps if s.name.endswith("invalid email"))
        assert len(email_step.request.body["username"]) >= 3

    def test_type_mismatch_for_unconstrained_fields(self):
        ep = _make_endpoint(request_schema={
            "type": "object", "properties": {"count": {"type": "integer"}},
        })
        steps = _generator().generate_format_validation_cases(ep)
        assert steps[0].request.body == {"count": NOT_A_NUMBER}

    def test_opaque_properties_are_skipped(self):
        ep = _make_endpoint(request_schema={"type": "object", "properties": {"blob": {}}})
        assert _generator().generate_format_validation_cases(ep) == []

    def test_method_and_path(self):
        ep = _make_endpoint(method="PATCH", path="/users/{id}", request_schema=USER_SCHEMA)
        step = _generator().generate_format_validation_cases(ep)[0]
        assert step.request.method == "PATCH"
        assert step.request.path == "/users/{{resourceId}}"


class TestAuthErrorCases:
    def test_single_unauthenticated_step(self):
        ep = _make_endpoint(request_schema=USER_SCHEMA, security=[{"bearerAuth": []}])
        steps = _generator().generate_auth_error_cases(ep)

        assert len(steps) == 1
        assert steps[0].expect.status == 401
        assert steps[0].request.body is None
        assert "Authorization" not in steps[0].request.headers
        assert steps[0].request.method == "POST"
        assert steps[0].request.path == "/users"

    def test_multiple_schemes_still_one_step(self):
        ep = _make_endpoint(security=[{"bearerAuth": []}, {"apiKey": []}, {"oauth2": ["read"]}])
        assert len(_generator().generate_auth_error_cases(ep)) == 1

    def test_no_security_no_steps(self):
        assert _generator().generate_auth_error_cases(_make_endpoint()) == []
        assert _generator().generate_auth_error_cases(_make_endpoint(security=[])) == []


class TestGenerate:
    def test_families_concatenated_in_order(self):
        ep = _make_endpoint(request_schema=USER_SCHEMA, security=[{"bearerAuth": []}])
        steps = _generator().generate(ep)
        assert len(steps) == 2 + 3 + 1
        assert [s.expect.status for s in steps] == [400] * 5 + [401]
