"""Bind body markers to parameters and fix the final parameter order."""

from typing import TYPE_CHECKING, Optional

from sqlinclude.core.patterns import BODY_TOKEN, SIGILS
from sqlinclude.core.statement import BodyToken, Literal, ParameterDescriptor, ParamRef, StatementDescriptor
from sqlinclude.exceptions import (
    KindMismatchError,
    MixedMultiplicityError,
    UnboundParameterError,
    UnusedParameterError,
)
from sqlinclude.typing import Multiplicity, OperationKind
from sqlinclude.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlinclude.core.directives import ParsedHeader
    from sqlinclude.core.statement import ParameterDeclaration

__all__ = ("resolve_parameters", "resolve_statement", "tokenize_body")

logger = get_logger("resolver")


def tokenize_body(body: str) -> "tuple[BodyToken, ...]":
    """Split SQL body text into literal runs and parameter markers.

    Quoted strings, quoted identifiers, comments and ``::`` casts stay literal text.
    """
    tokens: list[BodyToken] = []
    current = 0
    for match in BODY_TOKEN.finditer(body):
        if match.group("sigil") is None:
            continue
        if match.start() > current:
            tokens.append(Literal(body[current : match.start()]))
        tokens.append(ParamRef(match.group("name"), SIGILS[match.group("sigil")]))
        current = match.end()
    if current < len(body):
        tokens.append(Literal(body[current:]))
    return tuple(tokens)


def resolve_parameters(
    name: str,
    kind: OperationKind,
    declarations: "Sequence[ParameterDeclaration]",
    tokens: "Sequence[BodyToken]",
    unused_parameters: str = "error",
    location: Optional[str] = None,
) -> "tuple[ParameterDescriptor, ...]":
    """Return the ordered parameters of a statement.

    With declarations the order is the declared order and every marker must
    name a declared parameter. Without declarations parameters are taken from
    the body in order of first occurrence, with the multiplicity of the sigil
    used there.

    Raises:
        KindMismatchError: A batch statement has declarations or markers.
        UnboundParameterError: A marker names an undeclared parameter.
        MixedMultiplicityError: A name is used with both sigils, or with the
            sigil that contradicts its declaration.
        UnusedParameterError: A declared parameter is never referenced and
            ``unused_parameters`` is ``"error"``.
    """
    refs = [token for token in tokens if isinstance(token, ParamRef)]

    if kind is OperationKind.BATCH and (declarations or refs):
        offending = declarations[0].name if declarations else refs[0].name
        msg = f"Batch statements cannot take parameters, found {offending!r}"
        raise KindMismatchError(msg, statement=name, location=location)

    first_seen: dict[str, Multiplicity] = {}
    for ref in refs:
        seen = first_seen.setdefault(ref.name, ref.multiplicity)
        if seen is not ref.multiplicity:
            msg = f"Parameter {ref.name!r} is used both as ':{ref.name}' and '#{ref.name}'"
            raise MixedMultiplicityError(msg, statement=name, location=location)

    if not declarations:
        return tuple(
            ParameterDescriptor(param_name, multiplicity, position)
            for position, (param_name, multiplicity) in enumerate(first_seen.items())
        )

    declared = {declaration.name: declaration for declaration in declarations}
    for param_name, multiplicity in first_seen.items():
        declaration = declared.get(param_name)
        if declaration is None:
            msg = f"Parameter '{multiplicity.sigil}{param_name}' is not declared by a '-- param:' directive"
            raise UnboundParameterError(msg, statement=name, location=location)
        if declaration.multiplicity is not multiplicity:
            expected = "a list" if declaration.multiplicity is Multiplicity.LIST else "a scalar"
            msg = f"Parameter {param_name!r} is declared as {expected} but used as '{multiplicity.sigil}{param_name}'"
            raise MixedMultiplicityError(msg, statement=name, location=location)

    parameters = []
    for position, declaration in enumerate(declarations):
        referenced = declaration.name in first_seen
        if not referenced:
            msg = f"Parameter {declaration.name!r} is declared but never used"
            if unused_parameters == "error":
                raise UnusedParameterError(msg, statement=name, location=location)
            if unused_parameters == "warn":
                logger.warning(
                    "%s (statement: %s)",
                    msg,
                    name,
                    extra={"extra_fields": {"statement": name, "parameter": declaration.name, "location": location}},
                )
        parameters.append(
            ParameterDescriptor(
                declaration.name,
                declaration.multiplicity,
                position,
                declared_type=declaration.declared_type,
                referenced=referenced,
            )
        )
    return tuple(parameters)


def resolve_statement(header: "ParsedHeader", unused_parameters: str = "error") -> StatementDescriptor:
    """Build the :class:`StatementDescriptor` of a parsed statement block."""
    tokens = tokenize_body(header.body)
    parameters = resolve_parameters(
        header.name,
        header.kind,
        header.declarations,
        tokens,
        unused_parameters=unused_parameters,
        location=header.body_location,
    )
    return StatementDescriptor(
        name=header.name,
        kind=header.kind,
        parameters=parameters,
        body=tokens,
        doc=header.doc,
        source=header.source,
    )
