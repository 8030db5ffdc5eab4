"""
Command model validation engine.

Overview
- Validator: the one-method interface (validate(command)) every rule implements.
  Validators add messages to command.errors; they never raise for bad input.
- Field rules (declared through parameter options)
  • Presence      presence=True
  • Numericality  numericality=True | {"greater_than": 0, "only_integer": True, ...}
  • Length        length={"minimum": 2, "maximum": 50} | {"is": 5} | {"within": range(2, 9)}
  • Inclusion     inclusion=[...] | {"within": [...]}
  • Exclusion     exclusion=[...] | {"within": [...]}
  • Format        format=re.compile(...) | {"with": ...} | {"without": ...}
  • Predicate     validate=callable | {"with": callable, "message": "..."}
  Every rule also accepts message=, allow_none= and allow_blank=.
- Object rules
  • Method: a model method decorated with @validator (cross-field checks).
  • Callback: any callable(command) registered through Model.validates(...).
- ConversionErrors: always-present rule, run last, that folds the model's
  conversion shadow map into errors unless the field already has an error.

Evaluation order (per validity check)
1. field rules, in parameter declaration order (rules of one parameter in the
   order their options were given);
2. object rules, in declaration order, ancestors first;
3. ConversionErrors.
"""
import decimal
import re
from collections.abc import Container, Iterable, Mapping, Sized

from .convert import ConvertError, Decimal
from .faults import UnknownRuleError, InvalidSchemaError
from .utils import Unset, blank, coalesce, rename

CONVERSION_MESSAGE = "is not a {}"
"""Template of the message added for a failed conversion ({} is the target type)."""


class Validator:
    """
    Base interface for validation rules.

    Subclasses implement validate(command), adding messages through
    command.errors.add(field, message).
    """

    def validate(self, command, /):
        raise NotImplementedError


class FieldValidator(Validator):
    """
    Base for rules attached to a single parameter.

    Subclasses declare accepted options in __options__ (name -> default) and
    implement check(value), returning the default failure message or None.
    Options named after Python keywords ("is", "with") are stored under a
    trailing underscore ("_is_", "_with_").

    Common options
    - message: replaces the rule's default message.
    - allow_none: skip the rule when the value is None.
    - allow_blank: skip the rule when the value is blank.
    """
    __rule__ = None
    __options__ = {}

    def __init__(self, field, /, **options):
        if not isinstance(field, str) or not field:
            raise InvalidSchemaError(f"{type(self).__rule__} rule field must be a non-empty string")
        self._field = field

        self._message = options.pop("message", Unset)
        if not isinstance(self._message, str | Unset):
            raise InvalidSchemaError(f"{self.__rule__} rule 'message' must be a string")
        self._allow_none = bool(options.pop("allow_none", False))
        self._allow_blank = bool(options.pop("allow_blank", False))

        for name, default in type(self).__options__.items():
            attribute = "_" + name + ("_" if name in ("is", "with") else "")
            setattr(self, attribute, options.pop(name, default))

        if options:
            raise InvalidSchemaError(
                f"{self.__rule__} rule got unexpected option(s): {', '.join(map(repr, options))}",
                hint="accepted options: %s" % " · ".join(("message", "allow_none", "allow_blank", *self.__options__)),
            )

    @property
    def field(self):
        return self._field

    def check(self, value, /):
        raise NotImplementedError

    def validate(self, command, /):
        value = getattr(command, self._field)
        if value is None and self._allow_none:
            return
        if self._allow_blank and blank(value):
            return
        if (message := self.check(value)) is not None:
            command.errors.add(self._field, coalesce(self._message, message))

    def __repr__(self):
        return f"{self.__rule__}({self._field!r})"


class Presence(FieldValidator):
    __rule__ = "presence"

    def check(self, value, /):
        if blank(value):
            return "can't be blank"


def _evaluate(bound):
    return bound() if callable(bound) else bound


class Numericality(FieldValidator):
    __rule__ = "numericality"
    __options__ = {
        "only_integer": False,
        "greater_than": Unset,
        "greater_than_or_equal_to": Unset,
        "equal_to": Unset,
        "less_than": Unset,
        "less_than_or_equal_to": Unset,
        "other_than": Unset,
        "odd": False,
        "even": False,
    }

    _comparisons = (
        ("greater_than", "must be greater than {}", lambda x, y: x > y),
        ("greater_than_or_equal_to", "must be greater than or equal to {}", lambda x, y: x >= y),
        ("equal_to", "must be equal to {}", lambda x, y: x == y),
        ("less_than", "must be less than {}", lambda x, y: x < y),
        ("less_than_or_equal_to", "must be less than or equal to {}", lambda x, y: x <= y),
        ("other_than", "must be other than {}", lambda x, y: x != y),
    )

    _parse = Decimal()

    def check(self, value, /):
        try:
            number = self._parse(value)
        except ConvertError:
            return "is not a number"
        if number is None or not number.is_finite():
            return "is not a number"

        integral = number == number.to_integral_value()
        if self._only_integer and not integral:
            return "must be an integer"

        for name, template, compare in self._comparisons:
            if (bound := getattr(self, "_" + name)) is Unset:
                continue
            bound = _evaluate(bound)
            if not compare(number, decimal.Decimal(str(bound)) if isinstance(bound, float) else bound):
                return template.format(bound)

        if self._odd and not (integral and number % 2 != 0):
            return "must be odd"
        if self._even and not (integral and number % 2 == 0):
            return "must be even"


class Length(FieldValidator):
    __rule__ = "length"
    __options__ = {
        "minimum": Unset,
        "maximum": Unset,
        "is": Unset,
        "within": Unset,
    }

    def __init__(self, field, /, **options):
        super().__init__(field, **options)
        if self._within is not Unset:
            if not isinstance(self._within, range):
                raise InvalidSchemaError("length rule 'within' must be a range")
            self._minimum = self._within.start
            self._maximum = self._within.stop - 1
        for name in ("minimum", "maximum", "is_"):
            if not isinstance(bound := getattr(self, "_" + name), int | Unset) or isinstance(bound, bool):
                raise InvalidSchemaError(f"length rule {name.rstrip('_')!r} must be an integer")

    def check(self, value, /):
        if value is None:
            size = 0
        elif isinstance(value, Sized):
            size = len(value)
        else:
            size = len(str(value))

        if self._is_ is not Unset and size != self._is_:
            return f"is the wrong length (should be {self._is_} characters)"
        if self._minimum is not Unset and size < self._minimum:
            return f"is too short (minimum is {self._minimum} characters)"
        if self._maximum is not Unset and size > self._maximum:
            return f"is too long (maximum is {self._maximum} characters)"


class Inclusion(FieldValidator):
    __rule__ = "inclusion"
    __options__ = {"within": Unset}

    _default = "is not included in the list"

    def __init__(self, field, /, **options):
        super().__init__(field, **options)
        if isinstance(self._within, Iterable) and not isinstance(self._within, Container):
            self._within = tuple(self._within)
        if not callable(self._within) and not isinstance(self._within, Container):
            raise InvalidSchemaError(f"{self.__rule__} rule 'within' must be a container or a callable")

    def _included(self, value):
        try:
            return value in _evaluate(self._within)
        except TypeError:
            return False

    def check(self, value, /):
        if not self._included(value):
            return self._default


class Exclusion(Inclusion):
    __rule__ = "exclusion"

    _default = "is reserved"

    def check(self, value, /):
        if self._included(value):
            return self._default


class Format(FieldValidator):
    __rule__ = "format"
    __options__ = {"with": Unset, "without": Unset}

    def __init__(self, field, /, **options):
        super().__init__(field, **options)
        if (self._with_ is Unset) == (self._without is Unset):
            raise InvalidSchemaError("format rule needs exactly one of 'with' or 'without'")
        for name in ("_with_", "_without"):
            if isinstance(pattern := getattr(self, name), str):
                setattr(self, name, re.compile(pattern))
            elif not isinstance(pattern, re.Pattern | Unset):
                raise InvalidSchemaError("format rule pattern must be a string or a compiled regex")

    def check(self, value, /):
        text = "" if value is None else str(value)
        if self._with_ is not Unset and not self._with_.search(text):
            return "is invalid"
        if self._without is not Unset and self._without.search(text):
            return "is invalid"


class Predicate(FieldValidator):
    __rule__ = "validate"
    __options__ = {"with": Unset}

    def __init__(self, field, /, **options):
        super().__init__(field, **options)
        if not callable(self._with_):
            raise InvalidSchemaError("validate rule 'with' must be callable")

    def check(self, value, /):
        if not self._with_(value):
            return "is invalid"


class Method(Validator):
    """
    Object rule backed by a model method (see @validator).

    The method is looked up by name on each check, so subclasses may override it.
    """

    def __init__(self, name, /):
        self._name = name

    @property
    def name(self):
        return self._name

    def validate(self, command, /):
        getattr(command, self._name)()

    def __repr__(self):
        return f"method({self._name!r})"


class Callback(Validator):
    """Object rule backed by a plain callable(command)."""

    def __init__(self, callback, /):
        if not callable(callback):
            raise InvalidSchemaError("callback rule must be callable")
        self._callback = callback

    def validate(self, command, /):
        self._callback(command)

    def __repr__(self):
        return f"callback({getattr(self._callback, '__name__', self._callback)!r})"


class ConversionErrors(Validator):
    """
    Fold outstanding conversion failures into the error set.

    Must run after every other rule: a field that already carries an error
    does not also receive the "is not a <type>" message.
    """

    def validate(self, command, /):
        for field, target in command.conversion_errors.items():
            if field not in command.errors:
                command.errors.add(field, CONVERSION_MESSAGE.format(target))

    def __repr__(self):
        return "conversion-errors()"


_registry = {
    "presence": Presence,
    "numericality": Numericality,
    "length": Length,
    "inclusion": Inclusion,
    "exclusion": Exclusion,
    "format": Format,
    "validate": Predicate,
}


def _normalize(rule, options):
    """
    Turn a rule option value into keyword options for the rule class.

    - True                     -> {}
    - Mapping                  -> dict(mapping)
    - callable (validate)      -> {"with": callable}
    - str / Pattern (format)   -> {"with": pattern}
    - iterable (in/exclusion)  -> {"within": iterable}
    """
    if options is True:
        return {}
    if isinstance(options, Mapping):
        return dict(options)
    if rule == "validate" and callable(options):
        return {"with": options}
    if rule == "format" and isinstance(options, str | re.Pattern):
        return {"with": options}
    if rule in ("inclusion", "exclusion") and (isinstance(options, Iterable) or callable(options)):
        return {"within": options}
    raise InvalidSchemaError(f"{rule} rule options must be True or a mapping, not {options!r}")


def rules(field, options, /):
    """
    Build the field validators for one parameter.

    Parameters
    - field: parameter name the rules apply to.
    - options: mapping rule-name -> option value (False/None entries are skipped).

    Returns
    - tuple of FieldValidator instances, in the order the options were given.

    Raises
    - UnknownRuleError: an option that does not name a rule.
    - InvalidSchemaError: malformed rule options.
    """
    validators = []
    for rule, value in options.items():
        if rule not in _registry:
            raise UnknownRuleError(
                f"no validation rule named {rule!r} (parameter {field!r})",
                name=rule,
                hint="use one of: %s" % " · ".join(_registry),
            )
        if value is False or value is None:
            continue
        validators.append(_registry[rule](field, **_normalize(rule, value)))
    return tuple(validators)


@rename("validator")
def validator(function, /):
    """
    Mark a model method as an object-level validation rule.

    Usage
        class Transfer(Model):
            ...
            @validator
            def distinct_accounts(self):
                if self.source == self.target:
                    self.errors.add("target", "must differ from source")
    """
    if not callable(function):
        raise TypeError("@validator must be applied to a callable")
    function.__validator__ = True
    return function


__all__ = (
    # Interface
    "Validator",
    "FieldValidator",

    # Field rules
    "Presence",
    "Numericality",
    "Length",
    "Inclusion",
    "Exclusion",
    "Format",
    "Predicate",

    # Object rules
    "Method",
    "Callback",
    "ConversionErrors",

    # Helpers
    "rules",
    "validator",

    # Constants
    "CONVERSION_MESSAGE",
)
