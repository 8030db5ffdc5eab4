"""
Command model layer: declare, construct, validate and execute commands.

What this module provides
- Model: base class for commands. A subclass declares its schema with
  Parameter/Dependency descriptors (or the parameter()/dependency()
  classmethods) and implements perform(); callers build an instance from a
  raw input mapping, call() it, then inspect successful/errors/parameters.

Lifecycle of an instance
    fresh ──call()──▶ attempted-invalid             (perform() never ran)
          └─────────▶ attempted-valid-executed      (perform() ran, may add errors)

  1. construction: dependencies resolved (override or default supplier), then
     every supplied parameter goes through its converting writer;
  2. call(): valid() rebuilds errors, perform() (or the given body) runs only
     when there are none, and the instance is marked attempted;
  3. successful == execution_attempted and no errors.

Quick start
    from commandmodel import Model, Parameter, Dependency, validator

    class Transfer(Model):
        source = Parameter(presence=True)
        target = Parameter(presence=True)
        amount = Parameter(convert="decimal", presence=True, numericality={"greater_than": 0})
        ledger = Dependency()

        @validator
        def distinct_accounts(self):
            if self.source == self.target:
                self.errors.add("target", "must differ from source")

        def perform(self):
            self.ledger.move(self.source, self.target, self.amount)

    command = Transfer.execute(request.form, {"ledger": ledger})
    if not command.successful:
        render(command.errors.to_dict(), command.parameters)

Caveat
- call() has no re-entry guard: calling it again re-validates and, when still
  valid, runs perform() again. Treat an instance as single-use.

See also
- commandmodel.schema for the descriptors.
- commandmodel.convert and commandmodel.validations for the pipelines.
- commandmodel.faults for wiring errors raised at declaration/construction.
"""
import logging
import re
from collections.abc import Mapping
from types import MappingProxyType

from .convert import ConvertError
from .errors import Errors, OBJECT
from .faults import InvalidSchemaError, UnknownDependencyError, BlankDependencyError
from .schema import Parameter, Dependency
from .utils import *
from .validations import Validator, Method, Callback, ConversionErrors

logger = logging.getLogger(__name__)

_fold = ConversionErrors()


def _index(descriptors):
    """Map name -> descriptor; the last declaration of a name wins."""
    return MappingProxyType({descriptor.name: descriptor for descriptor in descriptors})


def _inherit(bases, attribute):
    """Concatenate an append-only schema tuple across bases, ancestors first."""
    inherited = []
    for base in bases:
        for item in getattr(base, attribute, ()):
            if not any(item is seen for seen in inherited):
                inherited.append(item)
    return inherited


class ModelType(type):
    """
    Metaclass that freezes a command class's schema at definition time.

    Responsibilities
    - Collect Parameter and Dependency descriptors from the class body, in
      definition order, and append them to the ancestors' schema. Each class
      gets fresh tuples, so declaring in a subclass never alters a parent.
    - Collect @validator methods as object-level rules (inherited, and
      overridable by name).
    - Build the name -> descriptor lookup tables used by the generic
      reader/writer.
    - Reject names that clash with each other or with inherited attributes.

    Class attributes set here
    - __parameters__, __dependencies__, __validators__: tuples.
    - __parameter_map__, __dependency_map__: read-only mappings.
    - __typename__: hyphenated lowercase class name for messages.
    """

    def __new__(cls, name, bases, namespace, **options):
        for key, value in namespace.items():
            if isinstance(value, Parameter | Dependency):
                _check_clash(bases, key, value)

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {"__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()},
            **options
        )

        parameters = _inherit(bases, "__parameters__")
        dependencies = _inherit(bases, "__dependencies__")
        validators = _inherit(bases, "__validators__")

        for value in namespace.values():
            if isinstance(value, Parameter):
                parameters.append(value)
            elif isinstance(value, Dependency):
                dependencies.append(value)

        for key, value in namespace.items():
            if getattr(value, "__validator__", False) and not any(
                    isinstance(validator, Method) and validator.name == key for validator in validators
            ):
                validators.append(Method(key))

        self.__parameters__ = tuple(parameters)
        self.__dependencies__ = tuple(dependencies)
        self.__validators__ = tuple(validators)
        self.__parameter_map__ = _index(parameters)
        self.__dependency_map__ = _index(dependencies)

        if shared := self.__parameter_map__.keys() & self.__dependency_map__.keys():
            raise InvalidSchemaError(
                f"{self.__typename__} declares {', '.join(map(repr, sorted(shared)))} as both parameter and dependency"
            )

        return self


def _check_clash(bases, name, descriptor, /):
    """
    Internal: refuse a field name that would hide an inherited attribute.

    Redeclaring a parameter as a parameter (or a dependency as a dependency)
    is allowed; anything else inherited under that name (methods such as
    call/errors, or a descriptor of the other kind) is a clash.
    """
    for base in bases:
        for klass in base.__mro__:
            if name not in vars(klass):
                continue
            existing = vars(klass)[name]
            if type(existing) is type(descriptor):
                return
            raise InvalidSchemaError(
                f"{type(descriptor).__name__.lower()} {name!r} clashes with an attribute of {klass.__name__!r}",
                name=name,
                hint="rename the field",
            )


class Model(metaclass=ModelType):
    """
    Base class of all commands.

    Construction
    - Model(parameters=None, dependencies=None)
      • parameters: None, a mapping of raw values (unknown keys are ignored) or
        an instance of the same command type (its parameter values are
        re-assigned through the converting writers; dependencies, errors and
        attempt state are not copied).
      • dependencies: None or a mapping of overrides by dependency name.

    Raises (wiring faults, never validation errors)
    - UnknownDependencyError: an override names an undeclared dependency.
    - BlankDependencyError: a dependency resolved blank without allow_blank.
    """

    def __init__(self, parameters=None, dependencies=None):
        self._values = {}
        self._conversion_errors = {}
        self._errors = Errors()
        self._execution_attempted = False
        self._dependencies = {}
        self._resolve(dependencies)
        self.set_parameters(parameters)

    # -- schema declaration ------------------------------------------------

    @classmethod
    def parameter(cls, *names, convert=None, **rules):
        """
        Declare one or more parameters after the class body.

        Each name receives its own Parameter built from the same converter
        specification and rule options. Returns the new descriptors.
        """
        if not names:
            raise TypeError("parameter() requires at least one name")
        descriptors = tuple(Parameter(name, convert=convert, **rules) for name in names)
        cls._declare(descriptors, "__parameters__", "__parameter_map__")
        return descriptors

    @classmethod
    def dependency(cls, *names, default=None, allow_blank=False):
        """
        Declare one or more dependencies after the class body.

        default may be a constant or a zero-argument callable evaluated once
        per instance. Returns the new descriptors.
        """
        if not names:
            raise TypeError("dependency() requires at least one name")
        descriptors = tuple(Dependency(name, default=default, allow_blank=allow_blank) for name in names)
        cls._declare(descriptors, "__dependencies__", "__dependency_map__")
        return descriptors

    @classmethod
    def validates(cls, *validators):
        """
        Register object-level rules: Validator instances or callables(command).

        They run after field rules and @validator methods, in registration order.
        Only cls itself is updated: subclasses defined earlier keep the rules
        they inherited, so register before subclassing.
        """
        rules = []
        for validator in validators:
            if isinstance(validator, Validator):
                rules.append(validator)
            elif callable(validator):
                rules.append(Callback(validator))
            else:
                raise TypeError("validates() arguments must be validators or callables")
        cls.__validators__ = cls.__validators__ + tuple(rules)

    @classmethod
    def _declare(cls, descriptors, schema, lookup):
        for descriptor in descriptors:
            _check_clash((cls,), descriptor.name, descriptor)
            other = cls.__dependency_map__ if isinstance(descriptor, Parameter) else cls.__parameter_map__
            if descriptor.name in other:
                raise InvalidSchemaError(f"{cls.__typename__} already uses {descriptor.name!r} for another kind of field")
        for descriptor in descriptors:
            setattr(cls, descriptor.name, descriptor)
        setattr(cls, schema, getattr(cls, schema) + descriptors)
        setattr(cls, lookup, _index(getattr(cls, schema)))

    # -- construction ------------------------------------------------------

    def _resolve(self, dependencies):
        """
        Internal: resolve every declared dependency exactly once.
        """
        cls = type(self)
        if dependencies is None:
            overrides = {}
        elif isinstance(dependencies, Mapping):
            overrides = dict(dependencies)
        else:
            raise TypeError(f"{cls.__name__}() dependencies must be a mapping")

        if unknown := [name for name in overrides if name not in cls.__dependency_map__]:
            raise UnknownDependencyError(
                f"{cls.__typename__} has no dependency named {', '.join(map(repr, unknown))}",
                command=cls,
                name=unknown[0],
                hint="declared dependencies: %s" % (" · ".join(cls.__dependency_map__) or "none"),
            )

        for name, dependency in cls.__dependency_map__.items():
            if name in overrides:
                value = overrides[name]
                logger.debug("%s: dependency %r supplied by caller", cls.__typename__, name)
            else:
                value = dependency.supply()
                logger.debug("%s: dependency %r resolved from default", cls.__typename__, name)
            if blank(value) and not dependency.allow_blank:
                raise BlankDependencyError(
                    f"{cls.__typename__} dependency {name!r} cannot be blank",
                    command=cls,
                    name=name,
                    hint="pass it in the dependencies mapping or declare it with allow_blank=True",
                )
            self._dependencies[name] = value

    def _assign(self, name, value):
        """
        Internal: converting writer shared by every parameter.

        On success the converted value is stored and any pending conversion
        error for the field is cleared; on ConvertError the raw value is kept
        (for redisplay) and the target type is recorded.
        """
        parameter = type(self).__parameter_map__[name]
        try:
            converted = parameter.convert(value)
        except ConvertError as error:
            logger.debug("%s: parameter %r is not a %s", type(self).__typename__, name, error.target_type)
            self._values[name] = value
            self._conversion_errors[name] = error.target_type
        else:
            self._values[name] = converted
            self._conversion_errors.pop(name, None)

    def set_parameters(self, parameters):
        """
        Bulk-assign parameters from a mapping or a same-type instance.

        Each value goes through its field's converting writer. Keys that do
        not name a declared parameter are ignored.
        """
        if parameters is None:
            return
        if isinstance(parameters, Model):
            if type(parameters) is not type(self):
                raise TypeError(
                    f"set_parameters() expected a {type(self).__name__} instance, got {type(parameters).__name__}"
                )
            parameters = parameters.parameters
        elif not isinstance(parameters, Mapping):
            raise TypeError("set_parameters() argument must be a mapping or a command of the same type")

        lookup = type(self).__parameter_map__
        for name, value in parameters.items():
            if name not in lookup:
                logger.debug("%s: ignoring unknown parameter %r", type(self).__typename__, name)
                continue
            self._assign(name, value)

    # -- inspection --------------------------------------------------------

    execution_attempted = mirror("execution_attempted")
    conversion_errors = mirror("conversion_errors")
    dependencies = mirror("dependencies")

    @property
    def errors(self):
        return self._errors

    @property
    def parameters(self):
        return {name: self._values.get(name) for name in type(self).__parameter_map__}

    @property
    def successful(self):
        return self._execution_attempted and not self._errors

    # -- validation and execution ------------------------------------------

    def valid(self):
        """
        Rebuild errors from scratch and report whether there are none.

        Order: field rules (parameter declaration order), object rules, then
        the conversion-error fold.
        """
        self._errors.clear()
        for parameter in type(self).__parameters__:
            for validator in parameter.validators:
                validator.validate(self)
        for validator in type(self).__validators__:
            validator.validate(self)
        _fold.validate(self)
        logger.debug("%s: validation finished with %d error(s)", type(self).__typename__, len(self._errors))
        return not self._errors

    def perform(self):
        """
        Command body, run by call() only when the command is valid.

        Subclasses override it; it may add errors (typically under OBJECT) to
        report a failure discovered while executing.
        """
        raise NotImplementedError(f"{type(self).__name__} must override perform() or be called with a body")

    def call(self, body=None):
        """
        Validate, run the body when valid, and mark the instance attempted.

        body, when given, is a callable(command) used instead of perform().
        The instance is marked attempted even if the body raises.
        Returns self.
        """
        if body is not None and not callable(body):
            raise TypeError("call() argument must be callable")
        try:
            if self.valid():
                logger.debug("%s: executing", type(self).__typename__)
                if body is None:
                    self.perform()
                else:
                    body(self)
        finally:
            self._execution_attempted = True
        return self

    @classmethod
    def execute(cls, parameters=None, dependencies=None, body=None):
        """
        Construct (or reuse) a command and call it.

        - parameters: a raw mapping, None, or an existing instance of cls
          (reused as-is, dependencies cannot be supplied again).
        - dependencies: overrides used when constructing.
        - body: optional callable(command) replacing perform() for this call.
        """
        if isinstance(parameters, cls):
            if dependencies is not None:
                raise TypeError("execute() cannot re-resolve dependencies of an existing command")
            command = parameters
        else:
            command = cls(parameters, dependencies)
        return command.call(body)

    @classmethod
    def success(cls, dependencies=None):
        """An attempted, error-free command with no parameters set."""
        command = cls(None, dependencies)
        command._execution_attempted = True
        return command

    @classmethod
    def failure(cls, message, dependencies=None):
        """An attempted command carrying message as its single object-level error."""
        if not isinstance(message, str):
            raise TypeError("failure() first argument must be a string")
        command = cls(None, dependencies)
        command._execution_attempted = True
        command._errors.add(OBJECT, message)
        return command

    # -- representation ----------------------------------------------------

    def __rich_repr__(self):
        yield "parameters", self.parameters
        yield "errors", self._errors.to_dict()
        yield "execution_attempted", self._execution_attempted

    def __repr__(self):
        return f"{type(self).__typename__}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"


__all__ = (
    "Model",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ModelType
