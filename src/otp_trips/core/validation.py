"""Travel mode validation."""

from collections.abc import Sequence
from typing import Any

from .exceptions import InvalidModeError

SINGLE_MODES = ("WALK", "BICYCLE", "CAR", "TRANSIT", "BUS", "RAIL", "TRAM", "SUBWAY")

# Only bike-to-transit may be combined. WALK is added by the server itself
# for the transit modes, so it is never appended here.
COMBINED_MODES = (frozenset({"TRANSIT", "BICYCLE"}),)


def _split_tokens(mode: Any) -> list[str]:
    if isinstance(mode, str):
        return mode.split(",")
    if isinstance(mode, Sequence) and all(isinstance(token, str) for token in mode):
        return list(mode)
    raise InvalidModeError(
        [f"mode must be a string or a sequence of strings, got {type(mode).__name__}"]
    )


def validate_mode(mode: str | Sequence[str]) -> str:
    """Validate a travel mode and return the value for the API ``mode`` parameter.

    Args:
        mode: A single mode such as ``"BUS"``, or ``["TRANSIT", "BICYCLE"]``.
            A comma-joined string is treated the same as a sequence.

    Returns:
        Uppercase, comma-joined mode string

    Raises:
        InvalidModeError: If the mode or combination of modes is not supported
    """
    tokens = [token.strip().upper() for token in _split_tokens(mode)]
    if not tokens or not all(tokens):
        raise InvalidModeError(["mode must not be empty"])

    if len(tokens) == 1:
        if tokens[0] not in SINGLE_MODES:
            raise InvalidModeError(
                [f"mode '{tokens[0]}' is not one of {', '.join(SINGLE_MODES)}"]
            )
        return tokens[0]

    if len(set(tokens)) == len(tokens) and frozenset(tokens) in COMBINED_MODES:
        return ",".join(tokens)

    raise InvalidModeError(
        [
            f"mode combination '{','.join(tokens)}' is not supported; "
            "only TRANSIT with BICYCLE may be combined"
        ]
    )
