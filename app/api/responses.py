"""
Конверт ответа API: {"success": true, "message": ..., "data": ...}.
"""

from typing import Any, Dict, Optional


def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body
