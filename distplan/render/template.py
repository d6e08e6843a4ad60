"""Compile and render templates.

    compiled = compile_template(source, name="formula.rb.j2", dialect="ruby")
    text = compiled.flat_map(lambda t: t.render(context))

Rendering is a single linear pass over the parsed nodes. Any failure aborts
the whole render: there is no partial output.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from distplan.core.result import Err, Ok, Result
from distplan.errors import MalformedTemplate, RenderError, UndefinedVariable
from distplan.render.escape import Dialect
from distplan.render.lexer import TemplateSyntaxError, tokenize
from distplan.render.nodes import Node
from distplan.render.parser import parse_tokens
from distplan.render.runtime import Evaluator, RenderFailure, UndefinedError


@dataclass(frozen=True, slots=True)
class Template:
    name: str
    nodes: tuple[Node, ...]
    dialect: Dialect = "none"

    def render(self, context: Mapping[str, object]) -> Result[str, RenderError]:
        out: list[str] = []
        evaluator = Evaluator(context, dialect=self.dialect)
        try:
            evaluator.emit(self.nodes, out)
        except UndefinedError as e:
            return Err(UndefinedVariable(name=e.name, template=self.name, line=e.line))
        except RenderFailure as e:
            return Err(MalformedTemplate(detail=e.detail, template=self.name, line=e.line))
        return Ok("".join(out))


def compile_template(
    source: str,
    *,
    name: str = "<string>",
    dialect: Dialect = "none",
    trim_blocks: bool = True,
    lstrip_blocks: bool = True,
) -> Result[Template, MalformedTemplate]:
    try:
        tokens = tokenize(source, trim_blocks=trim_blocks, lstrip_blocks=lstrip_blocks)
        nodes = parse_tokens(tokens)
    except TemplateSyntaxError as e:
        return Err(MalformedTemplate(detail=e.detail, template=name, line=e.line))
    return Ok(Template(name=name, nodes=nodes, dialect=dialect))


def render_string(
    source: str,
    context: Mapping[str, object],
    *,
    name: str = "<string>",
    dialect: Dialect = "none",
) -> Result[str, RenderError]:
    """Compile and render in one step."""
    compiled = compile_template(source, name=name, dialect=dialect)
    if isinstance(compiled, Err):
        return compiled
    return compiled.value.render(context)
