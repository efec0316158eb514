from yapara.core.model import Bare, Named
from yapara.core.naming.name_tests import compose_name, is_oversized, render_values, resolve_id


def test_render_values_reads_like_source():
    assert render_values({"a": 1, "b": 2, "expected": 3}) == "a: 1, b: 2, expected: 3"
    assert render_values({"s": "2", "n": None}) == "s: '2', n: None"
    assert render_values({"nested": {"x": [1, 2]}}) == "nested: {'x': [1, 2]}"


def test_resolve_id_derived_fragment_is_unbracketed():
    fragment, values = resolve_id(Bare({"a": 1, "b": 2}))
    assert fragment == "a: 1, b: 2"
    assert values == {"a": 1, "b": 2}


def test_resolve_id_explicit_fragment_is_bracketed():
    fragment, values = resolve_id(Named("explicit_id", {"a": 1, "b": "2"}))
    assert fragment == "[explicit_id]"
    assert values == {"a": 1, "b": "2"}


def test_compose_name_wraps_derived_fragments():
    assert compose_name("basic test", "a: 1, b: 2, expected: 3", 1) == "basic test[a: 1, b: 2, expected: 3]"
    assert compose_name("basic test", "a: 1, b: 2, expected: 4", 2) == "basic test[a: 1, b: 2, expected: 4]"


def test_compose_name_keeps_explicit_fragments():
    assert compose_name("name", "[explicit_id]", 1) == "name[explicit_id]"


def test_compose_name_empty_parameter_set():
    assert compose_name("name", render_values({}), 1) == "name[]"


def test_oversized_name_falls_back_to_index():
    fragment = render_values({"a": "x" * 300})
    assert is_oversized("name", fragment)
    assert compose_name("name", fragment, 4) == "name[4]"


def test_ceiling_counts_bytes_not_characters():
    # 100 characters, 300 bytes
    fragment = render_values({"a": "€" * 100})
    assert len("name" + fragment) < 255
    assert compose_name("name", fragment, 2) == "name[2]"


def test_name_exactly_at_ceiling_is_kept():
    base = "n" * 250
    fragment = "[abc]"
    assert len((base + fragment).encode("utf-8")) == 255
    assert compose_name(base, fragment, 1) == base + fragment
    assert compose_name(base, fragment, 1, max_bytes=254) == base + "[1]"
