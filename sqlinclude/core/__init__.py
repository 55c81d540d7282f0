"""Statement compiler core.

- segmenter.py: split source text into terminator-delimited blocks
- directives.py: parse ``-- name:`` and ``-- param:`` headers
- resolver.py: bind body markers to parameters and fix their order
- assembler.py: render placeholders and bound values
- statement.py: immutable descriptor types shared by the passes
"""

from sqlinclude.core.assembler import AssembledQuery, StaticQuery, assemble, assemble_dynamic, build_static_query
from sqlinclude.core.directives import ParsedHeader, parse_directives, parse_param_declaration
from sqlinclude.core.resolver import resolve_parameters, resolve_statement, tokenize_body
from sqlinclude.core.segmenter import iter_statement_sources, split_statements
from sqlinclude.core.statement import (
    Literal,
    ParameterDeclaration,
    ParameterDescriptor,
    ParamRef,
    StatementDescriptor,
    StatementSource,
)

__all__ = (
    "AssembledQuery",
    "Literal",
    "ParamRef",
    "ParameterDeclaration",
    "ParameterDescriptor",
    "ParsedHeader",
    "StatementDescriptor",
    "StatementSource",
    "StaticQuery",
    "assemble",
    "assemble_dynamic",
    "build_static_query",
    "iter_statement_sources",
    "parse_directives",
    "parse_param_declaration",
    "resolve_parameters",
    "resolve_statement",
    "split_statements",
    "tokenize_body",
)
