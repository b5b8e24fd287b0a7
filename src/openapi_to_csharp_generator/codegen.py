"""Render emission records into C# source text with Jinja2 templates."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

import jinja2

from .model_types import ApiVersionRecord, ClientRecord, ModelRecord, RootClientRecord

TEMPLATE_DIR = Path(__file__).parent / "templates"

_STANDARD_HTTP_METHODS = frozenset({"Get", "Put", "Post", "Delete", "Options", "Head", "Trace"})
_CSHARP_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}
_XML_ESCAPES: dict[str, str] = {"&": "&amp;", "<": "&lt;", ">": "&gt;"}


def csharp_string_literal(value: str) -> str:
    """Quote text as a regular C# string literal."""
    return '"' + "".join(_CSHARP_ESCAPES.get(char, char) for char in value) + '"'


def xml_doc_text(value: Optional[str]) -> str:
    """Escape text for use inside an XML documentation comment."""
    if not value:
        return ""
    return "".join(_XML_ESCAPES.get(char, char) for char in value)


def http_method_expression(method: str) -> str:
    """Return the ``HttpMethod`` expression for a canonical verb such as ``Get``."""
    if method in _STANDARD_HTTP_METHODS:
        return f"HttpMethod.{method}"
    return f"new HttpMethod({csharp_string_literal(method.upper())})"


@lru_cache(maxsize=1)
def template_environment() -> jinja2.Environment:
    environment = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        lstrip_blocks=True,
        trim_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    environment.filters["csharp_string"] = csharp_string_literal
    environment.filters["xml_doc"] = xml_doc_text
    environment.filters["http_method"] = http_method_expression
    return environment


def render_model(model: ModelRecord, *, namespace: str) -> str:
    """Render a model as a C# class or enum source file.

    Args:
        model (ModelRecord): Model to render.
        namespace (str): Root namespace; models live in ``{namespace}.Models``.

    Returns:
        str: C# source text.
    """
    template_name = "model_enum.cs.j2" if model.is_enum else "model_class.cs.j2"
    template = template_environment().get_template(template_name)
    return template.render(model=model, namespace=namespace)


def render_client(client: ClientRecord, *, namespace: str) -> str:
    template = template_environment().get_template("client.cs.j2")
    return template.render(client=client, namespace=namespace)


def render_root_client(root: RootClientRecord) -> str:
    template = template_environment().get_template("root_client.cs.j2")
    return template.render(root=root)


def render_api_version(version: ApiVersionRecord) -> str:
    template = template_environment().get_template("api_version.cs.j2")
    return template.render(version=version)
