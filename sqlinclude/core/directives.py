"""Parse the directive header of a statement block.

A block starts with a ``-- name: <identifier><selector>`` line, followed by
any number of ``-- param:`` declarations and free-form comment lines (the
statement's documentation). The first line that is not a comment starts the
SQL body, which runs verbatim to the end of the block.
"""

from typing import Optional

from mypy_extensions import mypyc_attr

from sqlinclude.core.patterns import DIRECTIVE, NAME_HEADER, PARAM_DECLARATION, SELECTORS, SQL_COMMENT
from sqlinclude.core.statement import ParameterDeclaration, StatementSource
from sqlinclude.exceptions import StatementSyntaxError
from sqlinclude.typing import Multiplicity, OperationKind

__all__ = ("ParsedHeader", "parse_directives", "parse_param_declaration")


@mypyc_attr(allow_interpreted_subclasses=False)
class ParsedHeader:
    """Result of parsing one statement block's header."""

    __slots__ = ("body", "body_line", "declarations", "doc", "kind", "name", "source")

    def __init__(
        self,
        name: str,
        kind: OperationKind,
        declarations: "tuple[ParameterDeclaration, ...]",
        doc: str,
        body: str,
        body_line: int,
        source: StatementSource,
    ) -> None:
        self.name = name
        self.kind = kind
        self.declarations = declarations
        self.doc = doc
        self.body = body
        self.body_line = body_line
        self.source = source

    @property
    def body_location(self) -> str:
        return f"{self.source.source_name}:{self.body_line}"


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith("--")


def parse_param_declaration(line: str, location: Optional[str] = None) -> ParameterDeclaration:
    """Parse a single ``-- param:`` line.

    Raises:
        StatementSyntaxError: The line is not a well-formed declaration.
    """
    match = PARAM_DECLARATION.match(line)
    if match is None:
        msg = f"Malformed parameter declaration: {line.strip()!r}"
        raise StatementSyntaxError(msg, location=location)

    scalar_type = match.group("scalar")
    if scalar_type is not None:
        return ParameterDeclaration(match.group("name"), scalar_type, Multiplicity.SCALAR)

    element_type = match.group("bracket") if match.group("bracket") is not None else match.group("paren")
    if not element_type:
        msg = f"Missing list element type: {line.strip()!r}"
        raise StatementSyntaxError(msg, location=location)
    return ParameterDeclaration(match.group("name"), element_type, Multiplicity.LIST)


def parse_directives(source: StatementSource) -> ParsedHeader:
    """Split ``source`` into its name, kind, parameter declarations, doc and body.

    Raises:
        StatementSyntaxError: The name header is missing or malformed, a
            ``-- param:`` line is malformed or repeated, or the body is empty.
    """
    lines = source.text.split("\n")
    index = 0

    # Anything ahead of the name header may only be blank lines or plain comments.
    while index < len(lines):
        line = lines[index]
        if not line.strip():
            index += 1
            continue
        if not _is_comment(line):
            msg = f"Expected '-- name:' header, found SQL text: {line.strip()!r}"
            raise StatementSyntaxError(msg, location=source.line_location(index))
        directive = DIRECTIVE.match(line)
        if directive is None:
            index += 1
            continue
        if directive.group("keyword").lower() != "name":
            msg = "The '-- name:' header must come before any other directive"
            raise StatementSyntaxError(msg, location=source.line_location(index))
        break
    else:
        msg = "Statement block has no '-- name:' header"
        raise StatementSyntaxError(msg, location=source.location)

    header = NAME_HEADER.match(lines[index])
    if header is None:
        msg = f"Malformed name header or unknown selector (expected one of ?, !, &, ->): {lines[index].strip()!r}"
        raise StatementSyntaxError(msg, location=source.line_location(index))
    name = header.group("name")
    kind = SELECTORS[header.group("selector")]
    index += 1

    declarations: list[ParameterDeclaration] = []
    seen: set[str] = set()
    doc_lines: list[str] = []
    while index < len(lines):
        line = lines[index]
        if not line.strip():
            index += 1
            continue
        if not _is_comment(line):
            break
        directive = DIRECTIVE.match(line)
        if directive is None:
            comment = SQL_COMMENT.match(line)
            doc_lines.append(comment.group("text") if comment else line.strip())
        elif directive.group("keyword").lower() == "param":
            declaration = parse_param_declaration(line, source.line_location(index))
            if declaration.name in seen:
                msg = f"Parameter {declaration.name!r} is declared more than once"
                raise StatementSyntaxError(msg, statement=name, location=source.line_location(index))
            seen.add(declaration.name)
            declarations.append(declaration)
        else:
            msg = "A statement block may only have one '-- name:' header"
            raise StatementSyntaxError(msg, statement=name, location=source.line_location(index))
        index += 1

    body = "\n".join(lines[index:]).rstrip()
    if not body.strip():
        msg = "Statement has no SQL body"
        raise StatementSyntaxError(msg, statement=name, location=source.location)

    return ParsedHeader(
        name=name,
        kind=kind,
        declarations=tuple(declarations),
        doc="\n".join(doc_lines).strip(),
        body=body,
        body_line=source.start_line + index,
        source=source,
    )
