#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Type hints used internally by this package. Intended to be imported with

    from .internal_types import *
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
    TypeVar,
    Union,
    overload,
  )

from types import TracebackType
from ipaddress import IPv4Address

from typing_extensions import Self

Jsonable = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
"""A type hint for a value that can be serialized to JSON"""

JsonableDict = Dict[str, Jsonable]
"""A type hint for a JSON object"""

__all__ = [
    'TYPE_CHECKING',
    'Any', 'AsyncContextManager', 'AsyncIterable', 'AsyncIterator', 'Awaitable',
    'Callable', 'Dict', 'FrozenSet', 'Iterable', 'List', 'Mapping',
    'Optional', 'Sequence', 'Set', 'Tuple', 'Type', 'TypeVar', 'Union', 'overload',
    'TracebackType', 'IPv4Address', 'Self',
    'Jsonable', 'JsonableDict',
]
