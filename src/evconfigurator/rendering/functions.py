# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
String, sequence and mapping helpers available to template render bodies.

Names and argument order follow the sprig library so existing device
definitions read the same, e.g. ``{{ indent(2, text) }}``.
"""

from typing import Any

import yaml


def default(fallback: Any, given: Any = None) -> Any:
    return given if not empty(given) else fallback


def empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) == 0
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


def ternary(true_value: Any, false_value: Any, condition: Any) -> Any:
    return true_value if condition else false_value


def quote(*values: Any) -> str:
    return " ".join('"{}"'.format(str(v).replace('"', '\\"')) for v in values if v is not None)


def squote(*values: Any) -> str:
    return " ".join("'{}'".format(str(v)) for v in values if v is not None)


def indent(spaces: int, text: Any) -> str:
    pad = " " * int(spaces)
    return "\n".join(pad + line for line in str(text).split("\n"))


def nindent(spaces: int, text: Any) -> str:
    return "\n" + indent(spaces, text)


def trim(text: Any) -> str:
    return str(text).strip()


def lower(text: Any) -> str:
    return str(text).lower()


def upper(text: Any) -> str:
    return str(text).upper()


def contains(substr: Any, text: Any) -> bool:
    return str(substr) in str(text)


def has_key(mapping: dict, key: str) -> bool:
    return key in mapping


def make_list(*items: Any) -> list:
    return list(items)


def make_dict(*pairs: Any, **kwargs: Any) -> dict:
    if len(pairs) % 2:
        raise ValueError("dict expects an even number of arguments")
    result = {str(pairs[i]): pairs[i + 1] for i in range(0, len(pairs), 2)}
    result.update(kwargs)
    return result


def join(separator: str, items: Any) -> str:
    if isinstance(items, str):
        return items
    return str(separator).join(str(i) for i in items)


def split(separator: str, text: Any) -> list:
    return str(text).split(separator)


def replace(old: str, new: str, text: Any) -> str:
    return str(text).replace(old, new)


def to_yaml(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False).rstrip("\n")


FUNCTIONS = {
    "default": default,
    "empty": empty,
    "ternary": ternary,
    "quote": quote,
    "squote": squote,
    "indent": indent,
    "nindent": nindent,
    "trim": trim,
    "lower": lower,
    "upper": upper,
    "contains": contains,
    "hasKey": has_key,
    "list": make_list,
    "dict": make_dict,
    "join": join,
    "split": split,
    "replace": replace,
    "toYaml": to_yaml,
}
