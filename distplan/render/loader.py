"""Load the templates shipped inside the package."""

from __future__ import annotations

from importlib import resources

from distplan.core.result import Err, Result
from distplan.errors import MalformedTemplate
from distplan.render.escape import dialect_for
from distplan.render.template import Template, compile_template

CI_GITHUB_TEMPLATE = "ci/github_ci.yml.j2"
HOMEBREW_TEMPLATE = "installer/homebrew.rb.j2"


def load_template(name: str) -> Result[Template, MalformedTemplate]:
    """Compile a packaged template; the dialect follows the file extension."""
    try:
        source = resources.files("distplan.templates").joinpath(name).read_text(encoding="utf-8")
    except (FileNotFoundError, OSError) as e:
        return Err(MalformedTemplate(detail=f"cannot load template: {e}", template=name))
    return compile_template(source, name=name, dialect=dialect_for(name))
