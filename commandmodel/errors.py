"""
Ordered multi-map of validation errors.

Errors keeps, per field name, the messages added to it in insertion order, and
remembers the order in which fields first received a message. The reserved
OBJECT key holds object-level messages (errors about the command as a whole,
typically added by an execution body).

Rendering
- full_messages() prefixes each message with the humanized field name
  ("source_account" -> "Source account"); object-level messages stand alone.
- to_dict() is the plain structure handed to views and JSON responses.
- __rich__ renders a compact two-column table for consoles.
"""
from collections import defaultdict

from rich.table import Table
from rich.text import Text

OBJECT = "object"
"""Reserved field key for object-level errors."""


def _humanize(name):
    text = name.removesuffix("_id").replace("_", " ").strip()
    return text[:1].upper() + text[1:]


class Errors:
    """
    Ordered field -> messages multi-map.

    Quick reference
    - errors.add("amount", "can't be blank")
    - errors["amount"]       -> ("can't be blank",)
    - "amount" in errors     -> True
    - len(errors)            -> total number of messages
    - bool(errors)           -> False when empty
    - for field, message in errors: ...
    """
    __slots__ = ("_messages",)

    def __init__(self):
        self._messages = {}

    def add(self, field, message, /):
        if not isinstance(field, str):
            raise TypeError("add() first argument must be a string")
        if not isinstance(message, str):
            raise TypeError("add() second argument must be a string")
        self._messages.setdefault(field, []).append(message)

    def clear(self):
        self._messages.clear()

    @property
    def empty(self):
        return not self._messages

    def fields(self):
        return tuple(self._messages)

    def items(self):
        return tuple((field, tuple(messages)) for field, messages in self._messages.items())

    def full_messages(self):
        messages = []
        for field, message in self:
            messages.append(message if field == OBJECT else f"{_humanize(field)} {message}")
        return messages

    def to_dict(self):
        return {field: list(messages) for field, messages in self._messages.items()}

    def __getitem__(self, field):
        return tuple(self._messages.get(field, ()))

    def __contains__(self, field):
        return field in self._messages

    def __iter__(self):
        for field, messages in self._messages.items():
            for message in messages:
                yield field, message

    def __len__(self):
        return sum(map(len, self._messages.values()))

    def __bool__(self):
        return bool(self._messages)

    def __eq__(self, other):
        if isinstance(other, Errors):
            return self._messages == other._messages
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"errors({self.to_dict()!r})"

    def __rich__(self):
        styles = defaultdict(str, {
            "errors-field": "bold #FF4DA6",
            "errors-object": "bold #00E5FF",
            "errors-message": "#C8C8D0",
        } | getattr(__import__("__main__"), "__styles__", {}))

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column(no_wrap=True)
        table.add_column()
        for field, messages in self._messages.items():
            style = styles["errors-object" if field == OBJECT else "errors-field"]
            for index, message in enumerate(messages):
                table.add_row(Text(field if index == 0 else "", style), Text(message, styles["errors-message"]))
        return table


__all__ = (
    "Errors",
    "OBJECT",
)
