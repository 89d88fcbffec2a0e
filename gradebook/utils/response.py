from typing import Any, Iterable, List

def _envelope(success: bool, data: Any, message: str) -> dict:
    return {"success": success, "data": data, "message": message}

def success_response(data: Any = None, message: str = "Success") -> dict:
    return _envelope(True, data, message)

def error_response(message: str = "Error", data: Any = None) -> dict:
    return _envelope(False, data, message)

def field_errors(errors: Iterable[dict]) -> List[dict]:
    """Flattens pydantic error entries to ``{"field", "message"}`` pairs, dropping the ``body``/``query`` prefix."""
    flattened = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        flattened.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return flattened
