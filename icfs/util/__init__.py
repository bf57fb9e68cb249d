from typing import Any, Optional, Type, TypeGuard, TypeVar, overload

T = TypeVar("T")
O = TypeVar("O")


@overload
def yes(value: Optional[T]) -> TypeGuard[T]:
    ...


@overload
def yes(value: Optional[Any], typ: Type[O]) -> TypeGuard[O]:
    ...


def yes(value: Optional[T], typ: Optional[Type[O]] = None) -> TypeGuard[O | T]:

    if typ is None:
        return value is not None

    if value is not None and isinstance(value, typ):
        return True
    elif value is None:
        return False
    else:
        raise ValueError(f"'{value}' is not '{typ}'")
