from gql_e2e.config import FalsyGating
from gql_e2e.scenario.parser import parse_scenario_data
from gql_e2e.scenario.schema import ActionStep, QueryStep, action, query
from gql_e2e.scenario.validator import validate_group, validate_steps


def test_valid_steps():
    result = validate_steps([
        action("seed", lambda toolkit: {"a": 1}),
        query("read", query="{ a }", payload={"x": 1}, test_response=lambda r: None),
    ])

    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_empty_name_and_query_are_errors():
    result = validate_steps([QueryStep(name="  ", query="")])

    assert not result.valid
    assert {e.path for e in result.errors} == {"steps[0].name", "steps[0].query"}


def test_bad_input_and_handler_types():
    step = QueryStep(
        name="bad",
        query="{ a }",
        payload=[1, 2],
        before_request="nope",
        test_response={"not": "callable"},
        with_auth="yes",
    )

    result = validate_steps([step])

    paths = {e.path for e in result.errors}
    assert paths == {
        "steps[0].payload",
        "steps[0].before_request",
        "steps[0].test_response",
        "steps[0].with_auth",
    }


def test_unsupported_step_and_non_callable_action():
    result = validate_steps(["not a step", ActionStep(name="a", test=None)])

    assert not result.valid
    assert result.errors[0].message.startswith("Unsupported step type")
    assert result.errors[1].path == "steps[1].test"


def test_duplicate_names_and_empty_group_warn():
    duplicate = validate_steps([query("a", query="{ a }"), query("a", query="{ b }")])
    assert duplicate.valid
    assert duplicate.warnings[0].path == "steps[1].name"

    empty = validate_steps([])
    assert empty.valid
    assert empty.warnings[0].message == "No steps defined."


def test_falsy_handler_without_error_handler_warns_under_error_gating():
    steps = [query("maybe", query="{ a }", test_falsy=lambda r: None)]

    assert len(validate_steps(steps, FalsyGating.ERRORS).warnings) == 1
    assert validate_steps(steps, FalsyGating.JSON).warnings == []


def test_validate_group_reads_gating_from_config():
    group = parse_scenario_data({
        "name": "g",
        "config": {"falsy_gating": "json"},
        "steps": [{"name": "missing", "query": "{ a }", "expect": "falsy"}],
    })
    assert validate_group(group).warnings == []

    group.config["falsy_gating"] = "sometimes"
    result = validate_group(group)
    assert not result.valid
    assert result.errors[0].path == "config.falsy_gating"


def test_query_accepts_descriptor_mapping_with_name():
    step = query("display name", {"name": "ignored", "query": "{ a }", "with_auth": True})

    assert step.name == "display name"
    assert step.query == "{ a }"
    assert step.with_auth is True
    assert validate_steps([step]).valid


def test_validate_group_accepts_upper_case_gating():
    group = parse_scenario_data({
        "name": "g",
        "config": {"falsy_gating": "JSON"},
        "steps": [{"name": "missing", "query": "{ a }", "expect": "falsy"}],
    })

    result = validate_group(group)

    assert result.valid
    assert result.warnings == []
