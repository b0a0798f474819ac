import secrets

from fastapi import Header, HTTPException, Request


async def verify_api_key(request: Request, x_api_key: str | None = Header(default=None)) -> None:
    """Reject the request with 401 unless X-API-Key equals APP_API_KEY.

    A missing APP_API_KEY surfaces as ConfigError (503) so an unconfigured
    server never runs open.
    """
    expected_key = request.app.state.helper_config.get_string_val("APP_API_KEY")
    if not x_api_key or not secrets.compare_digest(x_api_key.encode(), expected_key.encode()):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
