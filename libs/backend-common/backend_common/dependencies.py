from collections.abc import Callable

from fastapi import Header, HTTPException, status
from sentry_sdk import set_tag, set_user


def make_get_current_user_id_header(
    service_name: str,
    header_alias: str = "X-User-Id",
    error_status_code: int = status.HTTP_401_UNAUTHORIZED,
    error_detail: str = "X-User-Id header required",
) -> Callable[[str | None], str]:
    def get_current_user_id(x_user_id: str | None = Header(default=None, alias=header_alias)) -> str:  # type: ignore[assignment]
        if not x_user_id:
            raise HTTPException(status_code=error_status_code, detail=error_detail)
        set_user({"id": str(x_user_id)})
        set_tag("service", service_name)
        return x_user_id

    return get_current_user_id


def user_headers(user_id: str, header_name: str = "X-User-Id") -> dict[str, str]:
    """Headers that scope a downstream service call to one user."""
    return {header_name: str(user_id)}
