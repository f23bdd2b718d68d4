"""
Transformation Step Handlers

Deterministic structural handlers applied locally by the transformation
engine. Each handler is a pure function ``(data, step, context) -> data``
that returns a new value and never mutates its input.

Field paths use dot notation (``"meta.author.name"``).
"""

import copy
from typing import Any, Callable, Dict

from mediator.errors import TransformationExecutionError
from mediator.schemas.transformation import TransformationStep


StepHandler = Callable[[Any, TransformationStep, Dict[str, Any]], Any]

_MISSING = object()


def get_nested(data: Any, path: str, default: Any = None) -> Any:
    current = data
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return default
    return current


def set_nested(data: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = data
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def _require_object(data: Any, step: TransformationStep) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TransformationExecutionError(
            f"Step '{step.type}' requires an object, got {type(data).__name__}",
            step_type=step.type,
        )
    return copy.deepcopy(data)


def direct_mapping(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Copy fields to new locations; identity when no mappings are given.

    Parameters:
        mappings: {target_path: source_path}
        keep_unmapped: keep fields that no mapping mentions (default False)
    """
    mappings = step.parameters.get("mappings") or {}
    if not mappings:
        return copy.deepcopy(data)

    source = _require_object(data, step)
    if step.parameters.get("keep_unmapped", False):
        mapped_sources = {p.split(".")[0] for p in mappings.values()}
        result = {k: v for k, v in source.items() if k not in mapped_sources}
    else:
        result = {}

    for target_path, source_path in mappings.items():
        value = get_nested(source, str(source_path), _MISSING)
        if value is not _MISSING:
            set_nested(result, str(target_path), value)
    return result


def rename_fields(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Rename top-level fields. Parameters: renames {old: new}."""
    result = _require_object(data, step)
    for old, new in (step.parameters.get("renames") or {}).items():
        if old in result:
            result[new] = result.pop(old)
    return result


def select_fields(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Keep only the listed top-level fields. Parameters: fields [..]."""
    source = _require_object(data, step)
    fields = step.parameters.get("fields") or []
    return {name: source[name] for name in fields if name in source}


def drop_fields(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Remove the listed top-level fields. Parameters: fields [..]."""
    result = _require_object(data, step)
    for name in step.parameters.get("fields") or []:
        result.pop(name, None)
    return result


_FORMATTERS = {
    "uppercase": str.upper,
    "lowercase": str.lower,
    "capitalize": str.capitalize,
    "trim": str.strip,
}


def format_value(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Apply a string format to one field.

    Parameters:
        field: dot path of the field
        format: uppercase | lowercase | capitalize | trim
    """
    result = _require_object(data, step)
    field = step.parameters.get("field")
    fmt = step.parameters.get("format")
    if fmt not in _FORMATTERS:
        raise TransformationExecutionError(
            f"Unknown format '{fmt}'. Valid formats: {', '.join(_FORMATTERS)}",
            step_type=step.type,
        )

    value = get_nested(result, str(field), _MISSING)
    if isinstance(value, str):
        set_nested(result, str(field), _FORMATTERS[fmt](value))
    return result


def _to_boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y", "on")
    return bool(value)


_CONVERTERS = {
    "string": lambda v: v if isinstance(v, str) else str(v),
    "integer": lambda v: int(float(v)) if isinstance(v, str) else int(v),
    "number": float,
    "boolean": _to_boolean,
    "array": lambda v: list(v) if isinstance(v, (list, tuple)) else [v],
}


def convert_type(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Convert one field to another type.

    Parameters:
        field: dot path of the field
        to: string | integer | number | boolean | array
    """
    result = _require_object(data, step)
    field = str(step.parameters.get("field"))
    target_type = step.parameters.get("to")
    if target_type not in _CONVERTERS:
        raise TransformationExecutionError(
            f"Unknown conversion target '{target_type}'. "
            f"Valid targets: {', '.join(_CONVERTERS)}",
            step_type=step.type,
        )

    value = get_nested(result, field, _MISSING)
    if value is _MISSING or value is None:
        return result

    try:
        set_nested(result, field, _CONVERTERS[target_type](value))
    except (TypeError, ValueError, OverflowError) as e:
        raise TransformationExecutionError(
            f"Cannot convert field '{field}' to {target_type}: {e}",
            step_type=step.type,
        )
    return result


def context_merge(data: Any, step: TransformationStep, context: Dict[str, Any]) -> Any:
    """Merge constants and context values into the data.

    Parameters:
        values: {field: constant} merged first
        from_context: [context key, ...] copied from the execution context
        target: optional dot path to merge into instead of the top level
    """
    result = _require_object(data, step)
    additions = dict(step.parameters.get("values") or {})
    for key in step.parameters.get("from_context") or []:
        if key in context:
            additions[key] = copy.deepcopy(context[key])

    target = step.parameters.get("target")
    if target:
        existing = get_nested(result, target)
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(additions)
        set_nested(result, target, merged)
    else:
        result.update(additions)
    return result


BUILTIN_HANDLERS: Dict[str, StepHandler] = {
    "direct_mapping": direct_mapping,
    "rename_fields": rename_fields,
    "select_fields": select_fields,
    "drop_fields": drop_fields,
    "format_value": format_value,
    "convert_type": convert_type,
    "context_merge": context_merge,
}
