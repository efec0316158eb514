import pytest

from yapara.core.expand.config import ExpandConfig
from yapara.core.expand.expand_declaration import expand
from yapara.core.model import named


def body(a, b, expected):
    """Adds two numbers."""
    assert a + b == expected


def test_one_test_per_parameter_set_in_order():
    tests = expand(
        "basic test",
        None,
        [
            {"a": 1, "b": 2, "expected": 3},
            {"a": 1, "b": 2, "expected": 4},
        ],
        body,
    )
    assert [t.name for t in tests] == [
        "basic test[a: 1, b: 2, expected: 3]",
        "basic test[a: 1, b: 2, expected: 4]",
    ]
    assert [t.index for t in tests] == [1, 2]
    assert [t.stub for t in tests] == [False, False]

    tests[0].function()
    with pytest.raises(AssertionError):
        tests[1].function()


def test_positional_and_keyed_forms_expand_identically():
    keyed = expand("add", None, [{"a": 1, "b": 2, "expected": 3}], body)
    positional = expand("add", None, [["a", "b", "expected"], [1, 2, 3]], body)
    assert [t.name for t in keyed] == [t.name for t in positional]
    assert [t.values for t in keyed] == [t.values for t in positional]
    positional[0].function()


def test_explicit_ids_name_the_test():
    tests = expand("name", "_", [("explicit_id", {"a": 1, "b": 2, "expected": 3}), named("other", a=0, b=0, expected=0)], body)
    assert [t.name for t in tests] == ["name[explicit_id]", "name[other]"]


def test_empty_parameter_list_expands_to_nothing():
    assert expand("nothing", None, [], body) == []


def test_docstring_is_copied_to_generated_tests():
    tests = expand("doc", None, [{"a": 0, "b": 0, "expected": 0}], body)
    assert tests[0].function.__doc__ == "Adds two numbers."


def test_declaration_location_defaults_to_the_body():
    tests = expand("loc", None, [{"a": 0, "b": 0, "expected": 0}], body)
    lines = {ln for _, _, ln in tests[0].function.__code__.co_lines() if ln is not None}
    assert body.__code__.co_firstlineno in lines
    assert tests[0].function.__code__.co_filename == body.__code__.co_filename


def test_stubs_are_named_like_full_tests():
    params = [{"a": 1, "b": 2, "expected": 3}, ("explicit_id", {"a": 1})]
    stubs = expand("todo", None, params)
    assert [t.name for t in stubs] == ["todo[a: 1, b: 2, expected: 3]", "todo[explicit_id]"]
    assert all(t.stub for t in stubs)


def test_stub_fails_as_not_implemented():
    (stub,) = expand("todo", None, [{"a": 1}])
    with pytest.raises(pytest.fail.Exception, match=r"todo\[a: 1\]: not implemented"):
        stub.function()
    assert [m.name for m in stub.function.pytestmark] == ["not_implemented"]


def test_expansion_is_deterministic():
    params = [["a", "b", "expected"], [1, 2, 3], [2, 2, 4]]
    first = expand("again", None, params, body)
    second = expand("again", None, params, body)
    assert [(t.name, t.values) for t in first] == [(t.name, t.values) for t in second]
    assert first[0].function is not second[0].function


def test_oversized_names_use_configured_ceiling():
    cfg = ExpandConfig(max_name_bytes=16)
    tests = expand("short", None, [{"a": 1}, {"a": 1234567890}], body, config=cfg)
    assert [t.name for t in tests] == ["short[a: 1]", "short[2]"]
