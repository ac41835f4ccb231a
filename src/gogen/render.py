"""Seam for template-driven generation from located declarations."""

from __future__ import annotations

from typing import Any, Protocol

from gogen.core.errors import InputError
from gogen.core.logging import get_logger
from gogen.fileset import FileSet
from gogen.syntax.nodes import TypeSpec

log = get_logger("render")


class Renderer(Protocol):
    """Turns one declaration into generated text.

    Implementations own the template format and any formatting of the
    output.
    """

    def render(self, spec: Any, node: TypeSpec, fs: FileSet) -> str:
        """Render ``node`` using ``spec``.

        Args:
            spec: Renderer specific template or template name.
            node: The declaration to render.
            fs: The FileSet the declaration belongs to, for positions and
                the semantic model.

        Returns:
            The generated text.
        """
        ...


def template_type(name: str, fs: FileSet, renderer: Renderer, spec: Any) -> str:
    """Locate the package-level type ``name`` in ``fs`` and render it.

    Raises:
        InputError: No type of that name is declared in the package.
    """
    node = fs.lookup_type(name)
    if node is None:
        log.warning("render.type_not_found", type=name, package=fs.package.name)
        raise InputError.decl_not_found("type", name)
    log.debug("render.type", type=name, position=str(fs.position(node)))
    return renderer.render(spec, node, fs)
