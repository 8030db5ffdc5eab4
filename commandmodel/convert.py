"""
Command model type conversion pipeline.

Overview
- Converter: base for stateless, callable converters (raw -> typed). A converter
  either returns the converted value or raises ConvertError naming the target
  type it failed to reach.
- Built-ins
  • Integer  -> int                (target "integer")
  • Float    -> float              (target "number")
  • Decimal  -> decimal.Decimal    (target "number", PRECISION significant digits)
  • Date     -> datetime.date      (target "date"; ISO first, then FORMAT)
  • Boolean  -> bool               (total, never fails)
  • StringMutator: applies a text transform before the value continues down the chain.
- Registry
  • register(name, converter) / resolve(spec) map symbolic names ("integer",
    "decimal", ...) to converter instances. Unknown names raise
    UnknownConverterError when a parameter is declared, never at assignment.
- chain(converters, value): left-to-right reduction; the first ConvertError aborts.

Blankness
- Numeric and date converters treat blank input (None, "", whitespace) as
  absence and return None rather than failing.

Strictness
- Text must be a complete numeric literal: "0.1" is not an integer and
  "12abc" is not a number. Python-only spellings ("nan", "inf", "1e") are rejected.
- Both sides of the decimal point need digits: ".5" and "5." are rejected, where
  Ruby's Float()/BigDecimal() would accept ".5".
- Integer text beyond the interpreter's digit limit (sys.get_int_max_str_digits)
  fails as a conversion error.
- Boolean treats any numeric zero (0, 0.0, Decimal("0")) as False.
"""
import datetime
import decimal
import re
from types import MappingProxyType

from .faults import UnknownConverterError, InvalidSchemaError
from .utils import blank

PRECISION = 16
"""Significant digits kept by the Decimal converter."""

FORMAT = "%m/%d/%Y"
"""Locale date pattern tried after the ISO YYYY-MM-DD form."""

_INTEGER = re.compile(r"[+-]?\d+(?:_\d+)*")
_NUMBER = re.compile(r"[+-]?\d+(?:_\d+)*(?:\.\d+(?:_\d+)*)?(?:[eE][+-]?\d+)?")
_ISO_DATE = re.compile(r"(\d\d\d\d)-(\d\d)-(\d\d)")


class ConvertError(Exception):
    """
    Raised by a converter that cannot reach its target type.

    Attributes
    - original_error: the underlying exception (or None when rejected by a rule).
    - target_type: human-readable target name ("integer", "number", "date", ...)
      used to build the "is not a <type>" validation message.
    """

    def __init__(self, original_error, target_type, /):
        super().__init__(f"cannot convert to {target_type}")
        self.original_error = original_error
        self.target_type = target_type


class Converter:
    """
    Base class for converters.

    Subclasses implement __call__(value). The class-level __target__ names the
    target type reported in ConvertError.
    """
    __target__ = None

    def __call__(self, value, /):
        raise NotImplementedError

    def fail(self, error=None, /):
        """Raise ConvertError for this converter's target type."""
        raise ConvertError(error, type(self).__target__) from error

    def __repr__(self):
        return f"{type(self).__name__.lower()}()"


class StringMutator(Converter):
    """
    Apply a text transform before the value continues down the chain.

    - force=False: text-like values (str) are transformed, anything else is
      passed through unchanged.
    - force=True: the value is coerced with str() first, then transformed.

    Example
        StringMutator(lambda text: text.replace(",", ""))  # "1,234" -> "1234"
    """

    def __init__(self, mutator, /, force=False):
        if not callable(mutator):
            raise TypeError("StringMutator() argument must be callable")
        self._mutator = mutator
        self._force = bool(force)

    def __call__(self, value, /):
        if self._force:
            return self._mutator(str(value))
        if isinstance(value, str):
            return self._mutator(value)
        return value

    def __repr__(self):
        return f"string-mutator(force={self._force!r})"


class Integer(Converter):
    __target__ = "integer"

    def __call__(self, value, /):
        if blank(value):
            return None
        if isinstance(value, bool):
            self.fail(TypeError("booleans are not integers"))
        if isinstance(value, int):
            return value
        if isinstance(value, float | decimal.Decimal):
            try:
                if value == int(value):
                    return int(value)
            except (ValueError, OverflowError, ArithmeticError) as error:
                self.fail(error)
            self.fail(ValueError(f"{value!r} has a fractional part"))
        if isinstance(value, str):
            if _INTEGER.fullmatch(text := value.strip()):
                try:
                    return int(text)
                except ValueError as error:
                    self.fail(error)
            self.fail(ValueError(f"invalid literal for integer: {value!r}"))
        self.fail(TypeError(f"can't convert {type(value).__name__} into integer"))


class Float(Converter):
    __target__ = "number"

    def __call__(self, value, /):
        if blank(value):
            return None
        if isinstance(value, bool):
            self.fail(TypeError("booleans are not numbers"))
        if isinstance(value, int | float | decimal.Decimal):
            try:
                return float(value)
            except (ValueError, OverflowError) as error:
                self.fail(error)
        if isinstance(value, str):
            if _NUMBER.fullmatch(text := value.strip()):
                return float(text)
            self.fail(ValueError(f"invalid value for float: {value!r}"))
        self.fail(TypeError(f"can't convert {type(value).__name__} into float"))


class Decimal(Converter):
    __target__ = "number"

    def __call__(self, value, /):
        if blank(value):
            return None
        if isinstance(value, bool):
            self.fail(TypeError("booleans are not numbers"))
        context = decimal.Context(prec=PRECISION)
        if isinstance(value, str):
            if not _NUMBER.fullmatch(text := value.strip()):
                self.fail(ValueError(f"invalid value for decimal: {value!r}"))
            value = text
        elif not isinstance(value, int | float | decimal.Decimal):
            self.fail(TypeError(f"can't convert {type(value).__name__} into decimal"))
        try:
            return context.create_decimal(value)
        except (ArithmeticError, ValueError) as error:
            self.fail(error)


class Date(Converter):
    __target__ = "date"

    def __call__(self, value, /):
        if blank(value):
            return None
        if isinstance(value, datetime.date):
            return value
        text = str(value)
        try:
            if match := _ISO_DATE.fullmatch(text):
                return datetime.date(*map(int, match.groups()))
            return datetime.datetime.strptime(text, FORMAT).date()
        except ValueError as error:
            self.fail(error)


class Boolean(Converter):
    """
    Total boolean converter.

    None, False, "", "0", "f", "false" and 0 are False; every other value,
    including arbitrary objects and empty containers, is True.
    """
    __target__ = "boolean"

    _FALSEY = ("", "0", "false", "f")

    def __call__(self, value, /):
        if value is None or value is False:
            return False
        if isinstance(value, str):
            return value not in self._FALSEY
        if isinstance(value, int | float | decimal.Decimal) and value == 0:
            return False
        return True


_registry = {
    "integer": Integer(),
    "float": Float(),
    "decimal": Decimal(),
    "date": Date(),
    "boolean": Boolean(),
}

converters = MappingProxyType(_registry)
"""Read-only view of the named converters."""


def register(name, converter, /):
    """
    Make converter resolvable by name in parameter declarations.

    Re-registering an existing name replaces it for declarations made
    afterwards; already-declared parameters keep the converter they resolved.
    """
    if not isinstance(name, str) or not (name := name.strip()):
        raise TypeError("register() first argument must be a non-empty string")
    if not callable(converter):
        raise TypeError("register() second argument must be callable")
    _registry[name] = converter
    return converter


def resolve(spec, /):
    """
    Normalize a converter specification into a tuple of callables.

    Accepted forms
    - None or ()            -> ()  (pass-through writer)
    - "name"                -> (registered converter,)
    - callable              -> (callable,)
    - iterable of the above -> tuple, order preserved

    Raises
    - UnknownConverterError: a name that is not registered.
    - InvalidSchemaError: an entry that is neither a name nor a callable.
    """
    if spec is None:
        return ()
    if isinstance(spec, str) or callable(spec):
        spec = (spec,)

    try:
        entries = tuple(spec)
    except TypeError:
        raise InvalidSchemaError(f"converter must be a name, a callable or a sequence of them, not {spec!r}") from None

    resolved = []
    for entry in entries:
        if isinstance(entry, str):
            try:
                resolved.append(_registry[entry])
            except KeyError:
                raise UnknownConverterError(
                    f"no converter named {entry!r}",
                    name=entry,
                    hint="use one of: %s" % " · ".join(sorted(_registry)),
                ) from None
        elif callable(entry):
            resolved.append(entry)
        else:
            raise InvalidSchemaError(f"converter must be a name or a callable, not {entry!r}")
    return tuple(resolved)


def chain(converters, value, /):
    """
    Run value through converters left to right.

    Each stage receives the previous stage's output. A ConvertError raised by
    any stage propagates immediately, aborting the rest of the chain.
    """
    for converter in converters:
        value = converter(value)
    return value


__all__ = (
    # Errors
    "ConvertError",

    # Converters
    "Converter",
    "StringMutator",
    "Integer",
    "Float",
    "Decimal",
    "Date",
    "Boolean",

    # Registry
    "converters",
    "register",
    "resolve",
    "chain",

    # Constants
    "PRECISION",
    "FORMAT",
)
