"""Assemble executable SQL text from a statement descriptor.

Statements whose parameters are all scalars get their SQL text once, at
compile time (:class:`StaticQuery`). Statements with at least one list
parameter are rebuilt on every call (:func:`assemble_dynamic`) because the
number of placeholders depends on the lengths of the lists passed in.
"""

from typing import TYPE_CHECKING, Any, Union

from mypy_extensions import mypyc_attr

from sqlinclude.core.statement import Literal, ParamRef, StatementDescriptor
from sqlinclude.typing import Multiplicity, PlaceholderStyle

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

__all__ = (
    "EMPTY_LIST_SQL",
    "AssembledQuery",
    "StaticQuery",
    "assemble",
    "assemble_dynamic",
    "build_static_query",
)

EMPTY_LIST_SQL = "NULL"

_EXHAUSTED: Any = object()


@mypyc_attr(allow_interpreted_subclasses=False)
class AssembledQuery:
    """SQL text and the values to bind to its placeholders, in placeholder order."""

    __slots__ = ("parameters", "sql")

    def __init__(self, sql: str, parameters: "list[Any]") -> None:
        self.sql = sql
        self.parameters = parameters

    def __iter__(self) -> "Iterator[Any]":
        return iter((self.sql, self.parameters))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssembledQuery):
            return NotImplemented
        return self.sql == other.sql and self.parameters == other.parameters

    def __repr__(self) -> str:
        return f"AssembledQuery(sql={self.sql!r}, parameters={self.parameters!r})"


@mypyc_attr(allow_interpreted_subclasses=False)
class StaticQuery:
    """Precomputed SQL text of a statement without list parameters.

    ``bind_order`` names the parameter bound at each placeholder index,
    ``None`` marking an index no marker refers to.
    """

    __slots__ = ("bind_order", "sql")

    def __init__(self, sql: str, bind_order: "tuple[Union[str, None], ...]") -> None:
        self.sql = sql
        self.bind_order = bind_order

    def bind(self, values: "Mapping[str, Any]") -> "list[Any]":
        """Return the positional values for one call."""
        return [None if name is None else values[name] for name in self.bind_order]

    def __repr__(self) -> str:
        return f"StaticQuery(sql={self.sql!r}, bind_order={self.bind_order!r})"


def build_static_query(
    descriptor: StatementDescriptor, style: PlaceholderStyle = PlaceholderStyle.QMARK_NUMERIC
) -> StaticQuery:
    """Render a statement whose parameters are all scalars.

    Every occurrence of a parameter maps to the same placeholder, numbered by
    the parameter's position in the final parameter list.

    Raises:
        ValueError: The statement has a list parameter.
    """
    if descriptor.is_dynamic:
        msg = f"Statement {descriptor.name!r} has list parameters and must be assembled per call"
        raise ValueError(msg)

    indexes = {parameter.name: parameter.index for parameter in descriptor.parameters}
    parts: list[str] = []
    for token in descriptor.body:
        if isinstance(token, Literal):
            parts.append(token.text)
        else:
            parts.append(style.render(indexes[token.name]))

    referenced = {token.name for token in descriptor.body if isinstance(token, ParamRef)}
    highest = max((indexes[name] for name in referenced), default=0)
    bind_order = tuple(
        parameter.name if parameter.name in referenced else None for parameter in descriptor.parameters[:highest]
    )
    return StaticQuery("".join(parts), bind_order)


def assemble_dynamic(
    descriptor: StatementDescriptor,
    values: "Mapping[str, Any]",
    style: PlaceholderStyle = PlaceholderStyle.QMARK_NUMERIC,
) -> AssembledQuery:
    """Build SQL text and bound values for one call.

    Placeholders are numbered in order of appearance across the whole
    statement. A list expands to one placeholder per element joined with
    ``", "``; an empty list renders ``NULL`` and binds nothing.
    """
    parts: list[str] = []
    parameters: list[Any] = []
    counter = 0
    for token in descriptor.body:
        if isinstance(token, Literal):
            parts.append(token.text)
            continue
        value = values[token.name]
        if token.multiplicity is Multiplicity.SCALAR:
            counter += 1
            parts.append(style.render(counter))
            parameters.append(value)
            continue
        iterator = iter(value)
        first = next(iterator, _EXHAUSTED)
        if first is _EXHAUSTED:
            parts.append(EMPTY_LIST_SQL)
            continue
        counter += 1
        parts.append(style.render(counter))
        parameters.append(first)
        for element in iterator:
            counter += 1
            parts.append(", ")
            parts.append(style.render(counter))
            parameters.append(element)
    return AssembledQuery("".join(parts), parameters)


def assemble(
    descriptor: StatementDescriptor,
    values: "Mapping[str, Any]",
    style: PlaceholderStyle = PlaceholderStyle.QMARK_NUMERIC,
) -> AssembledQuery:
    """Assemble ``descriptor`` for ``values`` with whichever strategy applies to it."""
    if descriptor.is_dynamic:
        return assemble_dynamic(descriptor, values, style)
    static = build_static_query(descriptor, style)
    return AssembledQuery(static.sql, static.bind(values))

