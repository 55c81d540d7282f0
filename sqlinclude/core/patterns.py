"""Regular expressions for the annotated SQL format."""

import re

from sqlinclude.typing import Multiplicity, OperationKind

__all__ = (
    "BODY_TOKEN",
    "DIRECTIVE",
    "NAME_HEADER",
    "PARAM_DECLARATION",
    "SELECTORS",
    "SIGILS",
    "SQL_COMMENT",
)

SQL_COMMENT = re.compile(r"^\s*--\s?(?P<text>.*?)\s*$")
"""Get SQL comment contents"""

DIRECTIVE = re.compile(r"^\s*--\s*(?P<keyword>name|param)\s*:", re.IGNORECASE)
"""Identifies directive comments, well-formed or not"""

NAME_HEADER = re.compile(r"^\s*--\s*name\s*:\s*(?P<name>[A-Za-z_]\w*)\s*(?P<selector>->|[?!&])\s*$", re.IGNORECASE)
"""Statement name followed by its selector"""

PARAM_DECLARATION = re.compile(
    r"^\s*--\s*param\s*:\s*(?P<name>[A-Za-z_]\w*)\s*"
    r"(?:"
    # scalar, explicit or inferred (``_``) type
    r":\s*(?P<scalar>\S(?:.*\S)?)"
    r"|"
    # list of the element type
    r"#\s*(?:\[\s*(?P<bracket>[^\]]*?)\s*\]|\(\s*(?P<paren>.*?)\s*\))"
    r")\s*$",
    re.IGNORECASE,
)
"""Parameter declaration: ``name : type``, ``name : _``, ``name # [type]`` or ``name # (type)``"""

BODY_TOKEN = re.compile(
    # single quote strings
    r"(?P<squote>'(?:''|[^'])*')|"
    # double quote identifiers
    r'(?P<dquote>"(?:""|[^"])*")|'
    # line and block comments
    r"(?P<comment>--[^\n]*|/\*(?:[^*]|\*(?!/))*\*/)|"
    # postgres style casts, x::int
    r"(?P<cast>::)|"
    r"(?P<sigil>[:#])(?P<name>[A-Za-z_]\w*)"
)
"""Scanner for parameter markers; quoted text, comments and casts are matched so they are skipped"""

SELECTORS = {kind.selector: kind for kind in OperationKind}
"""map selectors to their operation kind"""

SIGILS = {multiplicity.sigil: multiplicity for multiplicity in Multiplicity}
"""map marker sigils to their multiplicity"""
