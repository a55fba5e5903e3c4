# src/deviation_alerts/validation/validator.py

# --- Built Ins ---
import math
import re
from typing import List, Mapping

# --- Local Application Imports ---
from ..core.errors import InvalidRequestError
from ..core.models import AlertRequest, SymbolSet

ALLOWED_METHOD = "GET"
SYMBOLS_PARAM = "tradingPairs"
DEVIATION_PARAM = "deviation"
WILDCARD = "all"
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_deviation(raw: str) -> float:
    # float() alone also accepts forms such as "1_0" or "infinity".
    if not DECIMAL_PATTERN.fullmatch(raw):
        raise InvalidRequestError(
            f"Value for {DEVIATION_PARAM} param must be a positive number, got {raw}"
        )
    value = float(raw)
    if not math.isfinite(value) or value < 0:
        raise InvalidRequestError(
            f"Value for {DEVIATION_PARAM} param must be a positive number, got {raw}"
        )
    return value


def _expand_symbols(raw: str, symbol_set: SymbolSet) -> List[str]:
    symbols: List[str] = []
    for entry in raw.split(","):
        if entry.lower() == WILDCARD:
            symbols.extend(symbol_set)
        elif entry in symbol_set:
            symbols.append(entry)
        else:
            raise InvalidRequestError(
                f"{entry!r} is not a valid entry for {SYMBOLS_PARAM}; expected 'ALL' "
                f"or a list of one or more valid trading pairs"
            )
    return symbols


def validate_alert_request(
    method: str, query: Mapping[str, str], symbol_set: SymbolSet
) -> AlertRequest:
    """
    Validates an inbound alert request and returns the normalized form.

    A wildcard entry ('all', any case) expands in place to every known symbol
    in directory order. Duplicated entries are kept as requested.

    Raises:
        InvalidRequestError: on a non-GET method, missing params, a negative or
            non-numeric deviation, or an unknown symbol.
    """
    if method != ALLOWED_METHOD:
        raise InvalidRequestError(f"Request method must be {ALLOWED_METHOD}")

    raw_symbols = (query.get(SYMBOLS_PARAM) or "").strip()
    raw_deviation = (query.get(DEVIATION_PARAM) or "").strip()
    if not raw_symbols or not raw_deviation:
        raise InvalidRequestError(
            f"Missing required query string params '{SYMBOLS_PARAM}' and '{DEVIATION_PARAM}'"
        )

    deviation_threshold = _parse_deviation(raw_deviation)
    symbols = _expand_symbols(raw_symbols, symbol_set)

    return AlertRequest(symbols=symbols, deviation_threshold=deviation_threshold)
