"""
Evaluation of routing rules.

Rules are the jsonLogic produced by query_builder.tree_to_json_logic; only the
operations that builder emits are supported.
"""

from typing import Any

Logic = Any


class RuleError(ValueError):
    """Raised for an operation the evaluator does not know"""


def truthy(value: Any) -> bool:
    # jsonLogic truthiness: an empty list is false
    if isinstance(value, list):
        return len(value) > 0
    return bool(value)


def _var(data: Any, path: Any, default: Any = None) -> Any:
    if path is None or path == "":
        return data
    current = data
    for part in str(path).split("."):
        if isinstance(current, dict):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, list):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return default if current is None else current


def _to_number(value: Any) -> Any:
    if isinstance(value, bool) or isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _loose_equals(a: Any, b: Any) -> bool:
    if type(a) is not type(b) and (isinstance(a, (int, float)) or isinstance(b, (int, float))):
        return _to_number(a) == _to_number(b)
    return a == b


def _compare(op: str, a: Any, b: Any) -> bool:
    a, b = _to_number(a), _to_number(b)
    try:
        if op == "<":
            return a < b
        if op == "<=":
            return a <= b
        if op == ">":
            return a > b
        return a >= b
    except TypeError:
        return False


def _contains(needle: Any, haystack: Any) -> bool:
    if isinstance(haystack, str):
        return isinstance(needle, str) and needle in haystack
    if isinstance(haystack, (list, tuple, set)):
        return needle in haystack
    return False


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def evaluate(logic: Logic, data: Any = None) -> Any:
    """Evaluate a jsonLogic expression against data"""
    if isinstance(logic, list):
        return [evaluate(item, data) for item in logic]
    if not isinstance(logic, dict) or len(logic) != 1:
        return logic

    op, args = next(iter(logic.items()))

    # Array operations evaluate the inner logic once per item
    if op in ("some", "all", "none"):
        items = _as_list(evaluate(args[0], data))
        results = (truthy(evaluate(args[1], item)) for item in items)
        if op == "some":
            return any(results)
        if op == "all":
            return bool(items) and all(results)
        return not any(results)

    if op == "and":
        value: Any = True
        for arg in _as_list(args):
            value = evaluate(arg, data)
            if not truthy(value):
                return value
        return value
    if op == "or":
        value = False
        for arg in _as_list(args):
            value = evaluate(arg, data)
            if truthy(value):
                return value
        return value

    values = [evaluate(arg, data) for arg in _as_list(args)]

    if op == "var":
        return _var(data, *values[:2]) if values else data
    if op == "!":
        return not truthy(values[0] if values else None)
    if op == "!!":
        return truthy(values[0] if values else None)
    if op == "==":
        return _loose_equals(values[0], values[1])
    if op == "!=":
        return not _loose_equals(values[0], values[1])
    if op == "===":
        return values[0] == values[1]
    if op == "!==":
        return values[0] != values[1]
    if op in ("<", "<=", ">", ">="):
        if len(values) == 3:
            return _compare(op, values[0], values[1]) and _compare(op, values[1], values[2])
        return _compare(op, values[0], values[1])
    if op == "in":
        return _contains(values[0], values[1])
    if op == "if":
        for i in range(0, len(values) - 1, 2):
            if truthy(values[i]):
                return values[i + 1]
        return values[-1] if len(values) % 2 else None

    raise RuleError(f"Unsupported rule operation: {op}")
