from typing import Any, Dict, List, Optional


def envelope(message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """Successful response body: {success, message, data?}"""
    body: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_envelope(message: str, errors: Optional[List[Dict[str, str]]] = None,
                   code: Optional[str] = None) -> Dict[str, Any]:
    """Failed response body: {success: false, message, errors?, code?}"""
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if code:
        body["code"] = code
    return body
