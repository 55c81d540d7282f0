"""Compiler configuration."""

from typing import Any, Final, Optional, Union

from mypy_extensions import mypyc_attr

from sqlinclude.exceptions import ImproperConfigurationError
from sqlinclude.typing import PlaceholderStyle

__all__ = ("DEFAULT_TERMINATOR", "CompilerConfig")

DEFAULT_TERMINATOR: Final = "/"

UNUSED_PARAMETER_POLICIES: Final = frozenset({"error", "warn", "ignore"})
SYNTAX_ERROR_POLICIES: Final = frozenset({"abort", "skip"})

COMPILER_CONFIG_SLOTS: Final = (
    "check_types",
    "on_syntax_error",
    "placeholder_style",
    "terminator",
    "unused_parameters",
)


@mypyc_attr(allow_interpreted_subclasses=False)
class CompilerConfig:
    """Settings for compiling annotated SQL into operations.

    Args:
        terminator: Line that ends every statement block.
        placeholder_style: Numbered placeholder style emitted into assembled SQL.
            ``None`` uses the style of the driver adapter the operations run on.
        unused_parameters: What to do with a declared parameter the body never
            references: ``"error"``, ``"warn"`` or ``"ignore"``.
        on_syntax_error: ``"abort"`` raises on the first malformed statement,
            ``"skip"`` logs it and compiles the remaining statements.
        check_types: Check scalar arguments against their declared type at call time.
    """

    __slots__ = COMPILER_CONFIG_SLOTS

    def __init__(
        self,
        *,
        terminator: str = DEFAULT_TERMINATOR,
        placeholder_style: Optional[Union[PlaceholderStyle, str]] = None,
        unused_parameters: str = "error",
        on_syntax_error: str = "abort",
        check_types: bool = False,
    ) -> None:
        terminator = terminator.strip()
        if not terminator:
            msg = "terminator must contain at least one non-whitespace character"
            raise ImproperConfigurationError(msg)
        if unused_parameters not in UNUSED_PARAMETER_POLICIES:
            msg = f"unused_parameters must be one of {sorted(UNUSED_PARAMETER_POLICIES)}, got {unused_parameters!r}"
            raise ImproperConfigurationError(msg)
        if on_syntax_error not in SYNTAX_ERROR_POLICIES:
            msg = f"on_syntax_error must be one of {sorted(SYNTAX_ERROR_POLICIES)}, got {on_syntax_error!r}"
            raise ImproperConfigurationError(msg)
        style: Optional[PlaceholderStyle] = None
        if placeholder_style is not None:
            try:
                style = PlaceholderStyle(placeholder_style)
            except ValueError as e:
                msg = f"Unsupported placeholder style: {placeholder_style!r}"
                raise ImproperConfigurationError(msg) from e

        self.terminator = terminator
        self.placeholder_style = style
        self.unused_parameters = unused_parameters
        self.on_syntax_error = on_syntax_error
        self.check_types = check_types

    def replace(self, **changes: Any) -> "CompilerConfig":
        """Return a copy with ``changes`` applied."""
        current = {name: getattr(self, name) for name in COMPILER_CONFIG_SLOTS}
        unknown = set(changes) - set(current)
        if unknown:
            msg = f"Unknown CompilerConfig fields: {', '.join(sorted(unknown))}"
            raise ImproperConfigurationError(msg)
        current.update(changes)
        return CompilerConfig(**current)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompilerConfig):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in COMPILER_CONFIG_SLOTS)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, name) for name in COMPILER_CONFIG_SLOTS))

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in COMPILER_CONFIG_SLOTS)
        return f"CompilerConfig({fields})"
