"""sqlinclude: typed database operations compiled from annotated SQL files."""

from sqlinclude import adapters, core, exceptions, typing, utils
from sqlinclude.__metadata__ import __version__
from sqlinclude.adapters import GenericAdapter, SqliteAdapter
from sqlinclude.compiler import SQLCompiler
from sqlinclude.config import CompilerConfig
from sqlinclude.exceptions import (
    DuplicateNameError,
    EngineError,
    ImproperConfigurationError,
    KindMismatchError,
    MixedMultiplicityError,
    NoRowsError,
    ParameterTypeError,
    RowCallbackError,
    SQLFileNotFoundError,
    SQLFileParseError,
    SQLIncludeError,
    StatementCompileError,
    StatementSyntaxError,
    UnboundParameterError,
    UnterminatedStatementError,
    UnusedParameterError,
)
from sqlinclude.loader import SQLFileLoader, from_path, from_str
from sqlinclude.operations import SQLOperations
from sqlinclude.typing import Multiplicity, OperationKind, PlaceholderStyle

__all__ = (
    "CompilerConfig",
    "DuplicateNameError",
    "EngineError",
    "GenericAdapter",
    "ImproperConfigurationError",
    "KindMismatchError",
    "MixedMultiplicityError",
    "Multiplicity",
    "NoRowsError",
    "OperationKind",
    "ParameterTypeError",
    "PlaceholderStyle",
    "RowCallbackError",
    "SQLCompiler",
    "SQLFileLoader",
    "SQLFileNotFoundError",
    "SQLFileParseError",
    "SQLIncludeError",
    "SQLOperations",
    "SqliteAdapter",
    "StatementCompileError",
    "StatementSyntaxError",
    "UnboundParameterError",
    "UnterminatedStatementError",
    "UnusedParameterError",
    "__version__",
    "adapters",
    "core",
    "exceptions",
    "from_path",
    "from_str",
    "typing",
    "utils",
)
