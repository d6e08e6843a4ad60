from __future__ import annotations

import pytest

from distplan.core.result import Err, Ok
from distplan.errors import MalformedTemplate, UndefinedVariable
from distplan.render.escape import Dialect, Safe, dialect_for
from distplan.render.loader import CI_GITHUB_TEMPLATE, HOMEBREW_TEMPLATE, load_template
from distplan.render.template import compile_template, render_string


def _render(source: str, dialect: Dialect = "none", **context: object) -> str:
    result = render_string(source, context, dialect=dialect)
    assert isinstance(result, Ok), result
    return result.value


class TestConditionals:
    def test_if_elif_else(self) -> None:
        source = "{% if a %}A{% elif b %}B{% else %}C{% endif %}"
        assert _render(source, a=True, b=True) == "A"
        assert _render(source, a=False, b=True) == "B"
        assert _render(source, a=False, b=False) == "C"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, "yes"),
            (False, "no"),
            (None, "no"),
            ([], "no"),
            ({}, "no"),
            (["x"], "yes"),
            (0, "yes"),
            ("", "yes"),
        ],
    )
    def test_strict_truthiness(self, value: object, expected: str) -> None:
        assert _render("{% if v %}yes{% else %}no{% endif %}", v=value) == expected

    def test_operators(self) -> None:
        assert _render("{% if not a and (b or c) %}ok{% endif %}", a=False, b=False, c=True) == "ok"
        assert _render("{% if 'x' in xs %}in{% endif %}", xs=["x"]) == "in"
        assert _render("{% if 'y' not in xs %}out{% endif %}", xs=["x"]) == "out"
        assert _render("{% if n == 2 %}two{% endif %}{% if n != 3 %}!{% endif %}", n=2) == "two!"

    def test_inline_if(self) -> None:
        assert _render("{{ 'a' if flag else 'b' }}", flag=False) == "b"


class TestLoops:
    def test_last_element_separator(self) -> None:
        source = '{% for b in bins %}"{{ b }}"{% if not loop.last %}, {% endif %}{% endfor %}'
        assert _render(source, bins=["app", "app-helper"]) == '"app", "app-helper"'
        assert _render(source, bins=["app"]) == '"app"'

    def test_loop_info(self) -> None:
        source = "{% for x in xs %}{{ loop.index }}/{{ loop.length }}{{ '*' if loop.first else '' }} {% endfor %}"
        assert _render(source, xs=["a", "b"]) == "1/2* 2/2 "

    def test_for_else(self) -> None:
        assert _render("{% for x in xs %}{{ x }}{% else %}none{% endfor %}", xs=[]) == "none"

    def test_unpacking_mapping_items(self) -> None:
        assert _render("{% for k, v in m %}{{ k }}={{ v }};{% endfor %}", m={"a": 1, "b": 2}) == "a=1;b=2;"

    def test_nested_loops_shadow_loop(self) -> None:
        source = "{% for r in rows %}{% for c in r %}{{ c }}{% endfor %}{{ loop.index }}|{% endfor %}"
        assert _render(source, rows=[["a", "b"], ["c"]]) == "ab1|c2|"


class TestFilters:
    def test_join_and_length(self) -> None:
        assert _render("{{ xs | join(', ') }} ({{ xs | length }})", xs=["a", "b"]) == "a, b (2)"

    def test_default(self) -> None:
        assert _render("{{ missing | default('fallback') }}") == "fallback"
        assert _render("{{ present | default('fallback') }}", present="here") == "here"
        assert _render("{{ nothing | default('x') }}", nothing=None) == "x"

    def test_case_and_json(self) -> None:
        assert _render("{{ s | upper }} {{ s | lower }}", s="MiXed") == "MIXED mixed"
        assert _render("{{ v | json }}", v={"a": [1, True]}) == '{"a": [1, true]}'

    def test_bools_render_lowercase(self) -> None:
        assert _render("{{ a }} {{ b }}", a=True, b=False) == "true false"


class TestEscaping:
    def test_shell_quotes_every_interpolation(self) -> None:
        assert _render("echo {{ v }}", "shell", v="a b; rm -rf /") == "echo 'a b; rm -rf /'"
        assert _render("echo {{ v }}", "shell", v="plain-value") == "echo plain-value"

    def test_safe_bypasses_escaping(self) -> None:
        assert _render("{{ v | safe }}", "shell", v="a b") == "a b"
        assert _render("{{ v }}", "shell", v=Safe("a b")) == "a b"

    def test_ruby_escapes_string_literal(self) -> None:
        out = _render('desc "{{ v }}"', "ruby", v='say "hi" #{x} \\')
        assert out == 'desc "say \\"hi\\" \\#{x} \\\\"'

    def test_explicit_escape_filters(self) -> None:
        assert _render("{{ v | shell }}", v="a b") == "'a b'"
        assert _render("{{ v | ruby }}", v='"') == '\\"'

    def test_dialect_from_file_name(self) -> None:
        assert dialect_for("ci/github_ci.yml.j2") == "shell"
        assert dialect_for("installer/homebrew.rb.j2") == "ruby"
        assert dialect_for("notes.md.j2") == "none"


class TestWhitespace:
    def test_block_lines_vanish(self) -> None:
        source = "start\n  {% if a %}\n  body\n  {% endif %}\nend\n"
        assert _render(source, a=True) == "start\n  body\nend\n"
        assert _render(source, a=False) == "start\nend\n"

    def test_raw(self) -> None:
        assert _render("{% raw %}${{ matrix.runner }}{% endraw %}") == "${{ matrix.runner }}"


class TestErrors:
    def test_undefined_variable(self) -> None:
        result = render_string("line\n{{ missing }}", {}, name="t.j2")
        assert isinstance(result, Err)
        assert result.error == UndefinedVariable(name="missing", template="t.j2", line=2)

    def test_undefined_attribute_names_the_path(self) -> None:
        result = render_string("{{ url.value }}", {"url": {}})
        assert isinstance(result, Err)
        assert isinstance(result.error, UndefinedVariable)
        assert result.error.name == "url.value"

    def test_undefined_in_condition_is_an_error(self) -> None:
        result = render_string("{% if nope %}x{% endif %}", {})
        assert isinstance(result, Err)
        assert isinstance(result.error, UndefinedVariable)

    @pytest.mark.parametrize(
        "source",
        [
            "{% if x %}never closed",
            "{% for x in xs %}never closed",
            "{% endif %}",
            "{% else %}",
            "{% frobnicate %}",
            "{% if %}x{% endif %}",
            "{{ x | }}",
            "{{ (x }}",
            "{% for in xs %}{% endfor %}",
        ],
    )
    def test_malformed_templates(self, source: str) -> None:
        result = compile_template(source, name="bad.j2")
        assert isinstance(result, Err)
        assert isinstance(result.error, MalformedTemplate)
        assert result.error.template == "bad.j2"

    def test_unknown_filter(self) -> None:
        result = render_string("{{ x | nope }}", {"x": 1})
        assert isinstance(result, Err)
        assert isinstance(result.error, MalformedTemplate)
        assert "nope" in result.error.detail

    def test_interpolating_a_list_is_an_error(self) -> None:
        result = render_string("{{ xs }}", {"xs": [1, 2]})
        assert isinstance(result, Err)
        assert isinstance(result.error, MalformedTemplate)

    def test_no_partial_output(self) -> None:
        result = render_string("ok so far {{ missing }}", {})
        assert isinstance(result, Err)


@pytest.mark.parametrize("name", [CI_GITHUB_TEMPLATE, HOMEBREW_TEMPLATE])
def test_packaged_templates_compile(name: str) -> None:
    assert isinstance(load_template(name), Ok)


def test_missing_packaged_template() -> None:
    result = load_template("ci/nope.yml.j2")
    assert isinstance(result, Err)
    assert isinstance(result.error, MalformedTemplate)
