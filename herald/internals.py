"""
Herald internals: the record metaclass shared by value objects.

RecordType gives immutable value classes (patterns, parameters, descriptors,
results, contexts) one consistent surface:

- __typename__: hyphenated, lower-cased class name used in messages.
- read-only properties for every name in __introspectable__ (via mirror()).
- __repr__ / __rich_repr__ built from __displayable__ (or __introspectable__).
- __replace__ so that copy.replace(record, field=value) builds an updated copy
  by calling the class again with every introspectable field as a keyword.

Classes created with ``sealed=True`` refuse subclassing.

This module is internal; nothing here is re-exported from the package.
"""
import functools
import operator
import re

from .utils import *


class RecordType(type):
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({
                    ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
                })"
            self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield field, getattr(self, field)
        self.__rich_repr__ = __rich_repr__

        if "__replace__" not in namespace:
            @rename("__replace__")
            def __replace__(self, /, **changes):
                unknown = changes.keys() - set(type(self).__introspectable__)
                if unknown:
                    raise TypeError(f"{type(self).__typename__} has no field(s) {", ".join(sorted(unknown))}")
                return type(self)(**{
                    field: getattr(self, "_" + field) for field in type(self).__introspectable__
                } | changes)
            self.__replace__ = __replace__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


__all__ = (
    "RecordType",
)
