import typing
from collections.abc import Callable, Mapping
from dataclasses import MISSING, Field, fields
from types import NoneType, UnionType
from typing import Optional, Type, TypeVar, Union

from .logger import logger

T = TypeVar("T")


class ConfigError(Exception):
    pass


def assert_that(pred, e):
    if not pred:
        raise e


def _typecheck_simple(value, typ) -> bool:
    if typ is float:
        return type(value) in (float, int)

    type_origin = typing.get_origin(typ)

    if type_origin is not None:
        return isinstance(value, type_origin)

    return type(value) is typ


def type_check(value, typ: Type[T], e) -> T:
    type_origin = typing.get_origin(typ)

    if type_origin is Union or type_origin is UnionType:
        typechekd = any(
            value is None if arg is NoneType else _typecheck_simple(value, arg)
            for arg in typing.get_args(typ)
        )
    else:
        typechekd = _typecheck_simple(value, typ)

    if not typechekd:
        raise e

    return value


def _field_default(field: Field):
    if field.default is not MISSING:
        return field.default

    if field.default_factory is not MISSING:
        return field.default_factory()

    return MISSING


Loader = Callable[[Mapping], T]


def load_class_from_mapping(
    cls,
    d: Mapping,
    *,
    loaders: Optional[dict[str, Loader]] = None,
):
    logger.debug(f"load_class_from_mapping({cls.__name__}, {d})")

    loaders = loaders if loaders is not None else {}

    assert_that(
        isinstance(d, Mapping),
        ConfigError(f"{d} is not a mapping"),
    )

    unknown = set(d.keys()) - {field.name for field in fields(cls)}

    assert_that(
        len(unknown) == 0,
        ConfigError(f"Unknown keys for {cls.__name__}: {sorted(unknown)}"),
    )

    input_d = {}

    for field in fields(cls):
        if (loader := loaders.get(field.name)) is not None:
            input_d[field.name] = loader(d)
            continue

        value = d.get(field.name, _field_default(field))

        if value is MISSING:
            raise ConfigError(f"Missing '{field.name}' for {cls.__name__}")

        type_check(
            value,
            field.type,
            ConfigError(
                f"Mismatching type for {field.name}. Expected: {field.type} received {type(value)}"
            ),
        )

        input_d[field.name] = value

    try:
        return cls(**input_d)
    except TypeError as e:
        raise ConfigError(f"Error loading {cls.__name__}: {e}")
