from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from alsader.app import App
from alsader.core.modules.session.models import AuthToken
from alsader.errors import AuthenticationError

AUTH_COOKIE_NAME = "auth_token"

bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name=AUTH_COOKIE_NAME, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> AuthToken:
    """Return the first valid token: Authorization Bearer header, then the login cookie."""
    candidates: list[str] = []
    if credentials is not None and credentials.scheme.lower() == "bearer":
        candidates.append(credentials.credentials)
    if token_cookie:
        candidates.append(token_cookie)

    for candidate in candidates:
        auth_token = AuthToken(candidate)
        if await app.is_auth_token_valid(auth_token):
            return auth_token

    raise AuthenticationError("Missing or invalid authentication token")


AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken, Depends(get_auth_token)]
