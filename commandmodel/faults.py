"""
Command model faults (wiring errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for programmer/wiring faults.
  Codes are grouped by layer (schema declaration, dependency wiring) so logs and
  searches stay predictable.
- CommandModelError: base type that carries message + options and knows how to
  render itself through rich.
- One concrete subclass per fault, each also deriving from the matching builtin
  (TypeError/ValueError) so plain except clauses keep working.

What is NOT a fault
- Conversion failures (convert.ConvertError) are recoverable and end up as
  validation errors on the model.
- Validation errors live in the model's Errors map and never raise.

Integration
- Declarations raise UnknownConverterError/UnknownRuleError/InvalidSchemaError
  while the command class is being defined.
- Construction raises UnknownDependencyError/BlankDependencyError before any
  parameter is assigned.
- Hosts may remap codes through a __codes__ mapping and restyle rendering
  through a __styles__ mapping, both read from __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes for wiring errors (stable identifiers).

    grouping
    - schema declaration (2110x)
      • UNKNOWN_CONVERTER, UNKNOWN_RULE, INVALID_SCHEMA
    - dependency wiring (2120x)
      • UNKNOWN_DEPENDENCY, BLANK_DEPENDENCY
    """
    # --- schema declaration faults (21xxx) ---
    UNKNOWN_CONVERTER  = 21101
    UNKNOWN_RULE       = 21102
    INVALID_SCHEMA     = 21103

    # --- dependency wiring faults (21xxx) ---
    UNKNOWN_DEPENDENCY = 21201
    BLANK_DEPENDENCY   = 21202

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandModelError(Exception):
    """
    base class of every wiring fault raised by the command model.

    options
    - code: FaultCode of the fault (defaults to the subclass __faultcode__).
    - title: short lowercase title shown in the rendered header.
    - hint: one-sentence suggestion shown under the message.
    - any other keyword is kept for diagnostics (e.g. command, name, value).
    """
    __faultcode__ = FaultCode.INVALID_SCHEMA
    __title__ = "invalid schema"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__faultcode__,
            "title": type(self).__title__,
            "hint": None,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        styles = defaultdict(str, {
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(__import__("__main__"), "__styles__", {}))

        header = Text.assemble(
            "[ ",
            (self.code.normalize(), styles["code"]),
            " | ",
            (self.options["title"].title(), styles["error-title"]),
            " ]"
        )
        message = Text(str(self), styles["error-message"])

        if not self.options["hint"]:
            return Panel(message, title=header, title_align="left")

        hint = Text.assemble((" → ", styles["hint-arrow"]), (self.options["hint"], styles["hint"]))
        return Panel(Group(message, hint), title=header, title_align="left")


class UnknownConverterError(CommandModelError, ValueError):
    __faultcode__ = FaultCode.UNKNOWN_CONVERTER
    __title__ = "unknown converter"


class UnknownRuleError(CommandModelError, ValueError):
    __faultcode__ = FaultCode.UNKNOWN_RULE
    __title__ = "unknown validation rule"


class InvalidSchemaError(CommandModelError, TypeError):
    __faultcode__ = FaultCode.INVALID_SCHEMA
    __title__ = "invalid schema"


class UnknownDependencyError(CommandModelError, TypeError):
    __faultcode__ = FaultCode.UNKNOWN_DEPENDENCY
    __title__ = "unknown dependency"


class BlankDependencyError(CommandModelError, ValueError):
    __faultcode__ = FaultCode.BLANK_DEPENDENCY
    __title__ = "blank dependency"


__all__ = (
    "FaultCode",
    "CommandModelError",
    "UnknownConverterError",
    "UnknownRuleError",
    "InvalidSchemaError",
    "UnknownDependencyError",
    "BlankDependencyError",
)
