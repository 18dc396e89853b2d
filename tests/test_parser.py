import pytest

from gql_e2e.runner.registration import SequentialRegistrar, run
from gql_e2e.scenario.parser import (
    evaluate_saves,
    parse_scenario,
    parse_scenario_data,
    substitute,
)
from gql_e2e.scenario.schema import ActionStep, QueryStep, StepResult, StepType
from tests.fakes import FakeContext, FakeEnvironment, config_for


SCENARIO_YAML = """
name: Users
config:
  verbose: false
variables:
  prefix: e2e
steps:
  - name: seed role
    set:
      role: admin
  - name: create user
    query: |
      mutation($name: String!) { createUser(name: $name) { id token } }
    payload:
      name: "${prefix}-alice"
    save:
      userId: json.id
      session:
        itemId: json.id
        data: json.token
  - name: read user
    with_auth: true
    query: "query($id: ID!) { user(id: $id) { id } }"
    payload:
      id: "${userId}"
  - name: delete as anonymous
    query: "mutation($id: ID!) { deleteUser(id: $id) { id } }"
    payload:
      id: "${userId}"
    expect: error
    error_contains: denied
  - name: missing user
    query: "query { user(id: \\"nope\\") { id } }"
    expect: falsy
"""


def write_scenario(tmp_path, text=SCENARIO_YAML, name="users.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_scenario_file(tmp_path):
    group = parse_scenario(write_scenario(tmp_path))

    assert group.name == "Users"
    assert group.variables == {"prefix": "e2e"}
    assert group.config == {"verbose": False}
    assert [s.type for s in group.steps] == [
        StepType.ACTION, StepType.QUERY, StepType.QUERY, StepType.QUERY, StepType.QUERY,
    ]
    assert isinstance(group.steps[0], ActionStep)
    read = group.steps[2]
    assert isinstance(read, QueryStep)
    assert read.with_auth is True
    assert callable(read.payload)


def test_parsed_scenario_runs_end_to_end(tmp_path):
    def respond(query_text, variables, credential):
        if "createUser" in query_text:
            return {"data": {"createUser": {"id": "u-1", "token": "tok"}}}
        if "deleteUser" in query_text:
            return {"data": {"deleteUser": None}, "errors": [{"message": "Access denied"}]}
        if "nope" in query_text:
            return {"data": {"user": None}}
        return {"data": {"user": {"id": variables["id"]}}}

    context = FakeContext(responder=respond)
    group = parse_scenario(write_scenario(tmp_path))
    registrar = SequentialRegistrar()

    runner = run(group.name, config_for(FakeEnvironment(context), initial_variables=group.variables),
                 group.steps, registrar=registrar)

    assert registrar.result.all_passed, registrar.result.steps
    assert context.calls[0].variables == {"name": "e2e-alice"}
    assert context.calls[1].variables == {"id": "u-1"}
    assert context.calls[1].credential == {"itemId": "u-1", "data": "tok"}
    assert context.calls[2].credential is None
    assert runner.store["role"] == "admin"


def test_expect_error_fails_when_response_has_no_errors():
    group = parse_scenario_data({
        "name": "g",
        "steps": [{"name": "should fail", "query": "{ a }", "expect": "error"}],
    })
    registrar = SequentialRegistrar()

    run(group.name, config_for(FakeEnvironment()), group.steps, registrar=registrar)

    assert registrar.result.steps[0].status == "failed"
    assert "Expected errors" in registrar.result.steps[0].error


def test_error_contains_mismatch_fails():
    context = FakeContext(responses=[{"data": None, "errors": [{"message": "Timeout"}]}])
    group = parse_scenario_data({
        "name": "g",
        "steps": [{
            "name": "wrong error",
            "query": "{ a }",
            "expect": "error",
            "error_contains": "denied",
        }],
    })
    registrar = SequentialRegistrar()

    run(group.name, config_for(FakeEnvironment(context)), group.steps, registrar=registrar)

    assert registrar.result.steps[0].status == "failed"


def test_substitute_keeps_type_of_whole_placeholder():
    variables = {"id": 7, "user": {"tags": ["a", "b"]}}

    assert substitute("${id}", variables) == 7
    assert substitute("user-${id}", variables) == "user-7"
    assert substitute({"tag": "${user.tags[1]}", "ids": ["${id}"]}, variables) == {
        "tag": "b",
        "ids": [7],
    }
    assert substitute("${missing}", variables) is None
    assert substitute("x-${missing}", variables) == "x-"
    assert substitute(3, variables) == 3


def test_evaluate_saves():
    result = StepResult(
        json={"id": "abc", "items": [{"n": 1}]},
        variables={"prefix": "p"},
        context=None,
        data={"user": {"id": "abc"}},
        errors=[{"message": "m"}],
    )
    saves = {
        "id": "json.id",
        "first": "json.items[0].n",
        "fromData": "data.user.id",
        "message": "errors[0].message",
        "prefix": "variables.prefix",
        "nested": {"itemId": "json.id"},
    }
    assert evaluate_saves(saves, result) == {
        "id": "abc",
        "first": 1,
        "fromData": "abc",
        "message": "m",
        "prefix": "p",
        "nested": {"itemId": "abc"},
    }


@pytest.mark.parametrize("data, message", [
    ([], "must be a YAML mapping"),
    ({"steps": []}, "Missing required field 'name'"),
    ({"name": "g", "steps": {}}, "'steps' must be a list"),
    ({"name": "g", "steps": [{"query": "{ a }"}]}, "Missing required field 'name'"),
    ({"name": "g", "steps": [{"name": "s"}]}, "Missing required field 'query'"),
    ({"name": "g", "steps": [{"name": "s", "query": ""}]}, "non-empty string"),
    ({"name": "g", "steps": [{"name": "s", "query": "{ a }", "expect": "maybe"}]}, "Invalid expect"),
    ({"name": "g", "steps": [{"name": "s", "query": "{ a }", "error_contains": "x"}]}, "requires 'expect: error'"),
    ({"name": "g", "steps": [{"name": "s", "query": "{ a }", "payload": [1]}]}, "'payload' must be a mapping"),
    ({"name": "g", "steps": [{"name": "s", "query": "{ a }", "with_auth": "yes"}]}, "'with_auth' must be a boolean"),
    ({"name": "g", "steps": [{"name": "s", "query": "{ a }", "retries": 3}]}, "Unknown field"),
    ({"name": "g", "steps": [{"name": "s", "set": [1]}]}, "'set' must be a mapping"),
    ({"name": "g", "extra": 1, "steps": []}, "Unknown field"),
])
def test_invalid_scenarios_raise(data, message):
    with pytest.raises(ValueError, match=message):
        parse_scenario_data(data)


def test_parse_scenario_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_scenario(tmp_path / "missing.yaml")

    with pytest.raises(ValueError, match="Expected .yaml"):
        parse_scenario(write_scenario(tmp_path, name="users.json"))

    with pytest.raises(ValueError, match="Empty scenario"):
        parse_scenario(write_scenario(tmp_path, text="", name="empty.yaml"))

    with pytest.raises(ValueError, match="Malformed YAML"):
        parse_scenario(write_scenario(tmp_path, text="name: [unclosed", name="bad.yaml"))
