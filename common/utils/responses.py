"""
Standard API response helpers.

Success bodies are flat JSON objects; error bodies carry a single
human-readable ``error`` string.

Example:
    from common.utils import success_response, error_response

    @app.get("/users/user/{id}")
    async def get_user(id: str):
        account = await store.find_by_id(id)
        if not account:
            return JSONResponse(status_code=404, content=error_response("User not found"))
        return success_response({"user": account.to_public()})
"""

from typing import Any, Optional, Dict


def success_response(
    data: Optional[Dict[str, Any]] = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: Fields to include in the response body
        message: Optional success message

    Returns:
        Dictionary with the data fields and optional message
    """
    response: Dict[str, Any] = {}

    if message:
        response["message"] = message

    if data:
        response.update(data)

    return response


def error_response(message: str) -> Dict[str, Any]:
    """
    Create a standard error response.

    Args:
        message: Human-readable error message

    Returns:
        Dictionary with a single ``error`` key
    """
    return {"error": message}
