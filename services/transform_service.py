"""
Value transforms applied by mapping rules.

apply_transform() is a pure function of (value, spec). Bad arguments and
malformed patterns degrade to passthrough; unknown operations are a no-op.
"""

import re
from typing import Any, Optional, Union

import structlog

from models.mapping import TransformOp, TransformSpec

logger = structlog.get_logger(__name__)

_NOT_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"^-?(\d+\.?\d*|\.\d+)")

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


def stringify(value: Any) -> str:
    """String form of a value; lists are comma-joined."""
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    return str(value)


def to_number(value: Any) -> Union[int, float]:
    """
    Lossy numeric parse.

    Everything except digits, "." and "-" is stripped, then the longest
    leading number is taken. Unparseable input yields 0.
    """
    cleaned = _NOT_NUMERIC.sub("", stringify(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0

    text = match.group(0)
    if "." in text:
        return float(text)
    return int(text)


def _compile_flags(flags: Optional[str]) -> int:
    compiled = 0
    for flag in flags or "":
        compiled |= _REGEX_FLAGS.get(flag, 0)
    return compiled


def _apply_regex(value: Any, args: dict) -> Any:
    pattern = args.get("pattern")
    if not pattern:
        return value

    match = re.search(pattern, stringify(value), _compile_flags(args.get("flags")))
    if not match:
        return value

    group = args.get("group")
    if group is None or group == "":
        return match.group(0)

    captured = match.group(int(group) if str(group).isdigit() else group)
    return value if captured is None else captured


def _apply_split(value: Any, args: dict) -> list[str]:
    delimiter = args.get("delimiter") or ","
    return [piece.strip() for piece in stringify(value).split(delimiter) if piece.strip()]


def _apply_join(value: Any, args: dict) -> str:
    delimiter = args.get("delimiter") or ","
    if isinstance(value, (list, tuple)):
        return delimiter.join(stringify(v) for v in value)
    return stringify(value)


def apply_transform(value: Any, spec: TransformSpec, log=None) -> Any:
    """
    Apply a single transform to a value.

    Args:
        value: Scalar or list from the raw row (None short-circuits)
        spec: Operation name plus arguments
        log: Optional structured logger

    Returns:
        Transformed value, or the input unchanged when the transform
        cannot be applied
    """
    if value is None:
        return None

    log = log or logger
    args = spec.args or {}

    try:
        if spec.op == TransformOp.TRIM:
            return stringify(value).strip()
        if spec.op == TransformOp.LOWER:
            return stringify(value).lower()
        if spec.op == TransformOp.UPPER:
            return stringify(value).upper()
        if spec.op == TransformOp.REGEX:
            return _apply_regex(value, args)
        if spec.op == TransformOp.SPLIT:
            return _apply_split(value, args)
        if spec.op == TransformOp.JOIN:
            return _apply_join(value, args)
        if spec.op == TransformOp.TO_NUMBER:
            return to_number(value)
    except (re.error, IndexError, TypeError, ValueError) as e:
        log.warning(
            "transform_failed",
            op=spec.op,
            error=str(e),
            error_type=type(e).__name__
        )
        return value

    log.debug("unknown_transform_skipped", op=spec.op)
    return value
