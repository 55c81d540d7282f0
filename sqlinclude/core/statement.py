"""Immutable descriptors produced by the statement compiler."""

from typing import Any, Final, Optional, Union

from mypy_extensions import mypyc_attr

from sqlinclude.typing import Multiplicity, OperationKind

__all__ = (
    "INFERRED_TYPE",
    "BodyToken",
    "Literal",
    "ParamRef",
    "ParameterDeclaration",
    "ParameterDescriptor",
    "StatementDescriptor",
    "StatementSource",
    "resolve_python_type",
)

INFERRED_TYPE: Final = "_"

# Declared type texts that have an obvious Python counterpart. Anything else
# is kept as text and annotated as ``Any``.
_PYTHON_TYPES: Final[dict[str, type]] = {
    "i8": int,
    "i16": int,
    "i32": int,
    "i64": int,
    "isize": int,
    "u8": int,
    "u16": int,
    "u32": int,
    "u64": int,
    "usize": int,
    "int": int,
    "integer": int,
    "f32": float,
    "f64": float,
    "float": float,
    "real": float,
    "bool": bool,
    "boolean": bool,
    "str": str,
    "&str": str,
    "String": str,
    "text": str,
    "bytes": bytes,
    "&[u8]": bytes,
    "Vec<u8>": bytes,
    "blob": bytes,
}


def resolve_python_type(declared_type: Optional[str]) -> Any:
    """Map a declared type text to the Python type used in generated signatures."""
    if declared_type is None or declared_type == INFERRED_TYPE:
        return Any
    text = declared_type.strip()
    return _PYTHON_TYPES.get(text, _PYTHON_TYPES.get(text.lower(), Any))


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementSource:
    """Raw text of one statement block together with where it came from.

    ``start_line`` and ``end_line`` are 1-based and inclusive.
    """

    __slots__ = ("end_line", "source_name", "start_line", "text")

    def __init__(self, text: str, start_line: int, end_line: int, source_name: str = "<string>") -> None:
        self.text = text
        self.start_line = start_line
        self.end_line = end_line
        self.source_name = source_name

    @property
    def location(self) -> str:
        return f"{self.source_name}:{self.start_line}"

    def line_location(self, offset: int) -> str:
        """Location of the line ``offset`` lines into this block."""
        return f"{self.source_name}:{self.start_line + offset}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatementSource):
            return NotImplemented
        return (self.text, self.start_line, self.end_line, self.source_name) == (
            other.text,
            other.start_line,
            other.end_line,
            other.source_name,
        )

    def __hash__(self) -> int:
        return hash((self.text, self.start_line, self.end_line, self.source_name))

    def __repr__(self) -> str:
        return f"StatementSource({self.location}-{self.end_line})"


@mypyc_attr(allow_interpreted_subclasses=False)
class ParameterDeclaration:
    """A ``-- param:`` directive as written in the header."""

    __slots__ = ("declared_type", "multiplicity", "name")

    def __init__(self, name: str, declared_type: str, multiplicity: Multiplicity) -> None:
        self.name = name
        self.declared_type = declared_type
        self.multiplicity = multiplicity

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterDeclaration):
            return NotImplemented
        return (self.name, self.declared_type, self.multiplicity) == (
            other.name,
            other.declared_type,
            other.multiplicity,
        )

    def __hash__(self) -> int:
        return hash((self.name, self.declared_type, self.multiplicity))

    def __repr__(self) -> str:
        return f"ParameterDeclaration({self.name!r}, {self.declared_type!r}, {self.multiplicity.name})"


@mypyc_attr(allow_interpreted_subclasses=False)
class ParameterDescriptor:
    """A resolved parameter of a compiled statement.

    ``declared_type`` is ``None`` when the parameter was picked up from the
    body of a statement without ``-- param:`` directives.
    """

    __slots__ = ("declared_type", "multiplicity", "name", "position", "python_type", "referenced")

    def __init__(
        self,
        name: str,
        multiplicity: Multiplicity,
        position: int,
        declared_type: Optional[str] = None,
        referenced: bool = True,
    ) -> None:
        self.name = name
        self.multiplicity = multiplicity
        self.position = position
        self.declared_type = declared_type
        self.referenced = referenced
        self.python_type = resolve_python_type(declared_type)

    @property
    def is_list(self) -> bool:
        return self.multiplicity is Multiplicity.LIST

    @property
    def is_inferred(self) -> bool:
        return self.declared_type is None or self.declared_type == INFERRED_TYPE

    @property
    def index(self) -> int:
        """1-based placeholder index used by static assembly."""
        return self.position + 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterDescriptor):
            return NotImplemented
        return (self.name, self.multiplicity, self.position, self.declared_type, self.referenced) == (
            other.name,
            other.multiplicity,
            other.position,
            other.declared_type,
            other.referenced,
        )

    def __hash__(self) -> int:
        return hash((self.name, self.multiplicity, self.position, self.declared_type))

    def __repr__(self) -> str:
        return (
            f"ParameterDescriptor({self.name!r}, {self.multiplicity.name}, position={self.position}, "
            f"declared_type={self.declared_type!r})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class Literal:
    """Verbatim SQL text between parameter markers."""

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(("literal", self.text))

    def __repr__(self) -> str:
        return f"Literal({self.text!r})"


@mypyc_attr(allow_interpreted_subclasses=False)
class ParamRef:
    """A ``:name`` or ``#name`` marker in the statement body."""

    __slots__ = ("multiplicity", "name")

    def __init__(self, name: str, multiplicity: Multiplicity) -> None:
        self.name = name
        self.multiplicity = multiplicity

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParamRef):
            return NotImplemented
        return (self.name, self.multiplicity) == (other.name, other.multiplicity)

    def __hash__(self) -> int:
        return hash(("param", self.name, self.multiplicity))

    def __repr__(self) -> str:
        return f"ParamRef({self.multiplicity.sigil}{self.name})"


BodyToken = Union[Literal, ParamRef]


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementDescriptor:
    """Everything needed to synthesize the operation for one statement."""

    __slots__ = ("body", "doc", "kind", "name", "parameters", "source")

    def __init__(
        self,
        name: str,
        kind: OperationKind,
        parameters: "tuple[ParameterDescriptor, ...]",
        body: "tuple[BodyToken, ...]",
        doc: str = "",
        source: Optional[StatementSource] = None,
    ) -> None:
        self.name = name
        self.kind = kind
        self.parameters = tuple(parameters)
        self.body = tuple(body)
        self.doc = doc
        self.source = source

    @property
    def is_dynamic(self) -> bool:
        """True when at least one parameter is a list and the SQL must be built per call."""
        return any(p.is_list for p in self.parameters)

    @property
    def parameter_names(self) -> "tuple[str, ...]":
        return tuple(p.name for p in self.parameters)

    @property
    def template(self) -> str:
        """The body with its markers, as written."""
        return "".join(
            token.text if isinstance(token, Literal) else f"{token.multiplicity.sigil}{token.name}"
            for token in self.body
        )

    def get_parameter(self, name: str) -> Optional[ParameterDescriptor]:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def __repr__(self) -> str:
        params = ", ".join(f"{p.multiplicity.sigil}{p.name}" for p in self.parameters)
        return f"StatementDescriptor({self.name}{self.kind.selector} ({params}))"
