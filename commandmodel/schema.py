r"""
Command model schema descriptors.

Overview
- Parameter: a user-supplied field. Carries an ordered converter chain and the
  field validators built from its rule options. As a class attribute of a
  Model it is a data descriptor: reads return the current value, writes run
  the converting writer of the owning model.
- Dependency: a caller-supplied collaborator (a clock, the current actor, a
  repository). Resolved once per model instance from an override or from its
  default supplier; read-only from the outside.

Declaring
    >>> class Deposit(Model):
    ...     amount = Parameter(convert="decimal", presence=True, numericality={"greater_than": 0})
    ...     clock = Dependency(default=lambda: datetime.date.today)

  or, after the class body (several names at once):
    >>> Deposit.parameter("memo", "reference", length={"maximum": 140})
    >>> Deposit.dependency("actor")

Binding
- A descriptor learns its name either positionally (Parameter("amount")) or
  from the attribute it is assigned to (__set_name__). A descriptor binds
  exactly once; reusing one object under a second name is an InvalidSchemaError.
- Converter names and rule options are resolved while binding, so unknown
  names fail while the command class is being defined.

Introspection
- SpecType provides stable __repr__/__rich_repr__ and read-only properties for
  every name listed in __introspectable__ (see utils.mirror).
"""
import functools
import keyword
import operator
import re

from .convert import chain, resolve
from .faults import InvalidSchemaError
from .utils import *
from .validations import rules


class SpecType(type):
    """
    Metaclass that turns descriptor classes into introspectable specs.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - parameter(name='amount', converters=(decimal(),), ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers (e.g., rich).
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /):
    """
    Internal: validate a field name.

    Names must be public Python identifiers (no leading underscore, not a
    keyword) since they become attributes of the command class.
    """
    if not isinstance(name, str):
        raise InvalidSchemaError(f"{cls.__typename__} name must be a string")
    elif not name.isidentifier() or keyword.iskeyword(name):
        raise InvalidSchemaError(f"{cls.__typename__} name {name!r} must be a valid identifier")
    elif name.startswith("_"):
        raise InvalidSchemaError(f"{cls.__typename__} name {name!r} cannot be private")
    return name


class Parameter(metaclass=SpecType):
    """
    User-supplied, converted and validated field.

    Parameters
    - name: Unset | str (positional-only)
      Field name. When Unset, the attribute name the descriptor is assigned to.
    - convert: None | str | callable | sequence of str/callable
      Converter chain applied on every assignment (see convert.resolve).
    - **rules: validation rule options (see validations.rules), e.g.
      presence=True, numericality={"greater_than": 0}.

    Properties
    - name, converters, validators, rules: read-only, fixed once bound.
    """

    __introspectable__ = (
        "name",
        "converters",
        "validators",
        "rules",
    )

    def __init__(self, name=Unset, /, convert=None, **rules):
        self._name = Unset
        self._converters = resolve(convert)
        self._rules = rules
        self._validators = ()
        if name is not Unset:
            self._bind(name)

    def _bind(self, name, /):
        name = _sanitize_name(type(self), name)
        if self._name is not Unset:
            if self._name == name:
                return
            raise InvalidSchemaError(f"parameter {self._name!r} cannot be reused as {name!r}")
        self._validators = rules(name, self._rules)
        self._name = name

    def __set_name__(self, owner, name):
        self._bind(name)

    @property
    def bound(self):
        return self._name is not Unset

    def convert(self, value, /):
        """
        Run value through the converter chain.

        Raises convert.ConvertError when a stage fails; the caller decides what
        to keep (models keep the raw value and record the failure).
        """
        return chain(self._converters, value)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance._values.get(self._name)

    def __set__(self, instance, value):
        instance._assign(self._name, value)


class Dependency(metaclass=SpecType):
    """
    Caller-supplied, non-validated collaborator.

    Parameters
    - name: Unset | str (positional-only)
      Field name. When Unset, the attribute name the descriptor is assigned to.
    - default: value or zero-argument callable
      Used when no override is supplied. Callables are invoked once per
      model instance; wrap a callable collaborator in a lambda to pass it as
      a constant.
    - allow_blank: bool
      When False (the default), resolving to a blank value fails construction.
    """

    __introspectable__ = (
        "name",
        "default",
        "allow_blank",
    )

    def __init__(self, name=Unset, /, default=None, allow_blank=False):
        self._name = Unset
        self._default = default
        self._allow_blank = bool(allow_blank)
        if name is not Unset:
            self._bind(name)

    def _bind(self, name, /):
        name = _sanitize_name(type(self), name)
        if self._name is not Unset:
            if self._name == name:
                return
            raise InvalidSchemaError(f"dependency {self._name!r} cannot be reused as {name!r}")
        self._name = name

    def __set_name__(self, owner, name):
        self._bind(name)

    @property
    def bound(self):
        return self._name is not Unset

    def supply(self):
        """Evaluate the default supplier."""
        return self._default() if callable(self._default) else self._default

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance._dependencies[self._name]

    def __set__(self, instance, value):
        raise AttributeError(f"dependency {self._name!r} of {type(instance).__name__!r} is read-only")


__all__ = (
    "Parameter",
    "Dependency",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del SpecType
