from typeguard import typechecked
from types import FunctionType
from abc import ABCMeta


def _check(member):
    # staticmethod/classmethod objects are not functions, so unwrap and rewrap them
    if isinstance(member, FunctionType):
        return typechecked(member)
    if isinstance(member, (staticmethod, classmethod)) and isinstance(
        member.__func__, FunctionType
    ):
        return type(member)(typechecked(member.__func__))
    return member


class TypeCheckedMeta(type):
    def __new__(cls, name, bases, dct):
        new_dct = {k: _check(v) for k, v in dct.items()}
        return super().__new__(cls, name, bases, new_dct)


class CombinedMeta(ABCMeta, TypeCheckedMeta):
    pass


class TypeCheckBase(metaclass=CombinedMeta):
    pass
