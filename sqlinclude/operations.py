"""Synthesize callable operations from compiled statements.

Each statement becomes one plain function whose first argument is the
connection to run on. The function's parameters follow the statement's
resolved parameter order, and query (``?``) and returning (``->``)
operations take a trailing ``row_callback``.
"""

import inspect
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Callable, Optional, cast

from typing_extensions import Self

from sqlinclude.config import CompilerConfig
from sqlinclude.core.assembler import assemble_dynamic, build_static_query
from sqlinclude.exceptions import (
    DuplicateNameError,
    NoRowsError,
    ParameterTypeError,
    RowCallbackError,
    SQLIncludeError,
    StatementCompileError,
)
from sqlinclude.typing import OperationFn, OperationKind, ReturningCallback, RowCallback
from sqlinclude.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from sqlinclude.core.statement import ParameterDescriptor, StatementDescriptor
    from sqlinclude.protocols import DriverAdapterProtocol
    from sqlinclude.typing import PlaceholderStyle

__all__ = ("CONNECTION_ARGUMENT", "ROW_CALLBACK_ARGUMENT", "SQLOperations", "synthesize_operation")

logger = get_logger("operations")

CONNECTION_ARGUMENT = "conn"
ROW_CALLBACK_ARGUMENT = "row_callback"
RESERVED_NAMES = frozenset({CONNECTION_ARGUMENT, ROW_CALLBACK_ARGUMENT})

_TAKES_ROW_CALLBACK = frozenset({OperationKind.QUERY, OperationKind.RETURNING})


def _build_signature(descriptor: "StatementDescriptor") -> inspect.Signature:
    params = [inspect.Parameter(CONNECTION_ARGUMENT, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    for parameter in descriptor.parameters:
        if parameter.name in RESERVED_NAMES:
            msg = f"Parameter name {parameter.name!r} is reserved for the generated operation"
            location = descriptor.source.location if descriptor.source else None
            raise StatementCompileError(msg, statement=descriptor.name, location=location)
        annotation = parameter.python_type
        if parameter.is_list:
            annotation = Iterable[annotation]  # type: ignore[valid-type]
        params.append(inspect.Parameter(parameter.name, inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=annotation))
    if descriptor.kind in _TAKES_ROW_CALLBACK:
        callback_annotation = RowCallback if descriptor.kind is OperationKind.QUERY else ReturningCallback
        params.append(
            inspect.Parameter(ROW_CALLBACK_ARGUMENT, inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=callback_annotation)
        )
    return_annotation: Any = {
        OperationKind.QUERY: None,
        OperationKind.EXECUTE: int,
        OperationKind.BATCH: None,
        OperationKind.RETURNING: Any,
    }[descriptor.kind]
    return inspect.Signature(parameters=params, return_annotation=return_annotation)


def _check_value(statement: str, parameter: "ParameterDescriptor", value: Any, check_types: bool) -> Any:
    """Validate one argument and return the value to bind; lists are materialized once."""
    if parameter.is_list:
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            msg = f"Parameter {parameter.name!r} of {statement!r} expects a list of values, got {type(value).__name__}"
            raise ParameterTypeError(msg)
        elements = list(value)
        if check_types and parameter.python_type is not Any:
            for element in elements:
                _check_scalar(statement, parameter, element)
        return elements
    if check_types and parameter.python_type is not Any:
        _check_scalar(statement, parameter, value)
    return value


def _check_scalar(statement: str, parameter: "ParameterDescriptor", value: Any) -> None:
    expected = parameter.python_type
    accepted: "tuple[type, ...]" = (expected, int) if expected is float else (expected,)
    if value is not None and not isinstance(value, accepted):
        msg = (
            f"Parameter {parameter.name!r} of {statement!r} is declared as {parameter.declared_type!r}, "
            f"got {type(value).__name__}"
        )
        raise ParameterTypeError(msg)


def _invoke_callback(callback: "Callable[[Any], Any]", row: Any, statement: str, row_number: int) -> Any:
    try:
        return callback(row)
    except SQLIncludeError:
        raise
    except Exception as exc:
        raise RowCallbackError(statement, row_number, exc) from exc


def synthesize_operation(
    descriptor: "StatementDescriptor",
    adapter: "DriverAdapterProtocol",
    config: Optional[CompilerConfig] = None,
) -> OperationFn:
    """Build the callable operation for ``descriptor``.

    Statements without list parameters have their SQL text rendered here, once;
    statements with list parameters render it on every call.

    Raises:
        StatementCompileError: A parameter uses a name reserved for the
            connection or row callback arguments.
    """
    config = config or CompilerConfig()
    style: "PlaceholderStyle" = config.placeholder_style or adapter.placeholder_style
    name = descriptor.name
    kind = descriptor.kind
    signature = _build_signature(descriptor)
    static = None if descriptor.is_dynamic else build_static_query(descriptor, style)
    check_types = config.check_types
    parameters = descriptor.parameters

    def bind(args: "Sequence[Any]", kwargs: "Mapping[str, Any]") -> "tuple[Any, dict[str, Any], Any]":
        arguments = signature.bind(*args, **kwargs).arguments
        values = {
            parameter.name: _check_value(name, parameter, arguments[parameter.name], check_types)
            for parameter in parameters
        }
        return arguments[CONNECTION_ARGUMENT], values, arguments.get(ROW_CALLBACK_ARGUMENT)

    def prepare(values: "Mapping[str, Any]") -> "tuple[str, list[Any]]":
        if static is not None:
            sql, bound = static.sql, static.bind(values)
        else:
            assembled = assemble_dynamic(descriptor, values, style)
            sql, bound = assembled.sql, assembled.parameters
        logger.debug(
            "Executing %s%s",
            name,
            kind.selector,
            extra={"extra_fields": {"statement": name, "operation": str(kind), "sql": sql, "parameter_count": len(bound)}},
        )
        return sql, bound

    # NOTE: the code location of each ``fn`` is rewritten below to point at the
    # statement in its SQL source, so coverage does not see these bodies run.
    if kind is OperationKind.QUERY:

        def fn(*args: Any, **kwargs: Any) -> None:  # pragma: no cover
            conn, values, row_callback = bind(args, kwargs)
            sql, bound = prepare(values)
            with adapter.select(conn, name, sql, bound) as cursor:
                row_number = 0
                while True:
                    with adapter.handle_database_exceptions():
                        row = cursor.fetchone()
                    if row is None:
                        return
                    row_number += 1
                    _invoke_callback(row_callback, row, name, row_number)

    elif kind is OperationKind.EXECUTE:

        def fn(*args: Any, **kwargs: Any) -> int:  # pragma: no cover
            conn, values, _ = bind(args, kwargs)
            sql, bound = prepare(values)
            return adapter.execute(conn, name, sql, bound)

    elif kind is OperationKind.BATCH:

        def fn(*args: Any, **kwargs: Any) -> None:  # pragma: no cover
            conn, _, _ = bind(args, kwargs)
            sql, _ = prepare({})
            adapter.execute_script(conn, name, sql)

    elif kind is OperationKind.RETURNING:

        def fn(*args: Any, **kwargs: Any) -> Any:  # pragma: no cover
            conn, values, row_callback = bind(args, kwargs)
            sql, bound = prepare(values)
            with adapter.select(conn, name, sql, bound) as cursor:
                with adapter.handle_database_exceptions():
                    row = cursor.fetchone()
                if row is None:
                    raise NoRowsError(name)
                return _invoke_callback(row_callback, row, name, 1)

    else:  # pragma: no cover
        msg = f"Unknown operation kind: {kind}"
        raise ValueError(msg)

    if descriptor.source is not None:
        fn.__code__ = fn.__code__.replace(
            co_filename=descriptor.source.source_name, co_firstlineno=descriptor.source.start_line
        )
    operation = cast("OperationFn", fn)
    operation.__name__ = name
    operation.__qualname__ = name
    operation.__doc__ = descriptor.doc or None
    operation.__signature__ = signature
    operation.sql = static.sql if static is not None else descriptor.template
    operation.operation = kind
    operation.descriptor = descriptor
    return operation


class SQLOperations:
    """Container object with one operation per compiled statement.

    Operations are attributes named after their statements and are called with
    the connection as first argument::

        ops.loan_books(conn, "Sheldon Cooper", [1, 2])

    Directory loads group the operations of a subdirectory into a child
    container reachable as an attribute of the parent.
    """

    def __init__(self, adapter: "DriverAdapterProtocol", config: Optional[CompilerConfig] = None) -> None:
        self.adapter = adapter
        self.config = config or CompilerConfig()
        self._operations: dict[str, OperationFn] = {}
        self._children: dict[str, SQLOperations] = {}

    #
    # PUBLIC INTERFACE
    #
    @property
    def available_operations(self) -> "list[str]":
        """Returns listing of all the available operations, children as dot-separated names."""
        names = set(self._operations)
        for child_name, child in self._children.items():
            names.update(f"{child_name}.{name}" for name in child.available_operations)
        return sorted(names)

    @property
    def descriptors(self) -> "list[StatementDescriptor]":
        """Descriptors of this container's own operations, in the order they were added."""
        return [operation.descriptor for operation in self._operations.values()]

    def __repr__(self) -> str:
        return f"SQLOperations({self.available_operations!r})"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self.available_operations

    def __iter__(self) -> "Iterator[OperationFn]":
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def get(self, name: str) -> OperationFn:
        """Return an operation by (possibly dotted) name.

        Raises:
            KeyError: No operation has that name.
        """
        head, _, tail = name.partition(".")
        if tail:
            if head not in self._children:
                raise KeyError(name)
            return self._children[head].get(tail)
        try:
            return self._operations[name]
        except KeyError:
            raise KeyError(name) from None

    def _check_free(self, name: str) -> None:
        if name in self._operations or name in self._children:
            msg = f"An operation named {name!r} is already defined"
            raise DuplicateNameError(msg, statement=name)
        if hasattr(type(self), name) or name.startswith("_"):
            msg = f"Operation name {name!r} clashes with an attribute of SQLOperations"
            raise StatementCompileError(msg, statement=name)

    def add_operation(self, name: str, fn: OperationFn) -> None:
        """Adds a new operation to this container.

        Raises:
            DuplicateNameError: ``name`` is already taken.
        """
        self._check_free(name)
        setattr(self, name, fn)
        self._operations[name] = fn

    def add_child_operations(self, child_name: str, child: "SQLOperations") -> None:
        """Adds an SQLOperations object as a namespace attribute."""
        self._check_free(child_name)
        setattr(self, child_name, child)
        self._children[child_name] = child

    def load_from_list(self, descriptors: "Iterable[StatementDescriptor]") -> Self:
        """Synthesize and add one operation per descriptor."""
        for descriptor in descriptors:
            self.add_operation(descriptor.name, synthesize_operation(descriptor, self.adapter, self.config))
        return self
