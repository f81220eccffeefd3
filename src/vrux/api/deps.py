"""
Request dependencies: container lookups, auth, plan limits and rate limiting.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated, TypeVar

from fastapi import Depends, Request
from fastapi.requests import HTTPConnection

from ..core import (
    ApiLimitError,
    AuthenticationError,
    RateLimiter,
    RateLimitError,
    SessionExpiredError,
    Settings,
    get_logger,
)
from ..generation import ComponentGenerator
from ..monitoring import metrics_collector
from ..operations import AlertingEngine, DashboardFeed, ServiceMonitor, SystemSampler
from ..providers import ProviderChain
from ..store import ShareStore, TemplateStore, User, UserStore

logger = get_logger(__name__)

T = TypeVar("T")


def from_container(cls: type[T]) -> Callable[[HTTPConnection], T]:
    """Dependency that resolves ``cls`` from the app's injector, for HTTP and WebSocket routes."""

    def resolve(connection: HTTPConnection) -> T:
        return connection.app.state.container.get(cls)

    resolve.__name__ = f"get_{cls.__name__}"
    return resolve


SettingsDep = Annotated[Settings, Depends(from_container(Settings))]
Generation = Annotated[ComponentGenerator, Depends(from_container(ComponentGenerator))]
Chain = Annotated[ProviderChain, Depends(from_container(ProviderChain))]
Limiter = Annotated[RateLimiter, Depends(from_container(RateLimiter))]
Templates = Annotated[TemplateStore, Depends(from_container(TemplateStore))]
Shares = Annotated[ShareStore, Depends(from_container(ShareStore))]
Users = Annotated[UserStore, Depends(from_container(UserStore))]
Alerts = Annotated[AlertingEngine, Depends(from_container(AlertingEngine))]
Sampler = Annotated[SystemSampler, Depends(from_container(SystemSampler))]
Monitor = Annotated[ServiceMonitor, Depends(from_container(ServiceMonitor))]
Feed = Annotated[DashboardFeed, Depends(from_container(DashboardFeed))]


def client_identifier(request: Request) -> str:
    """Rate-limit key: first forwarded-for address, then the peer host."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def rate_limited(request: Request, limiter: Limiter) -> str:
    """
    Count the request against the caller's window.

    Raises:
        RateLimitError: Window is full
    """
    identifier = client_identifier(request)
    if not limiter.is_allowed(identifier):
        metrics_collector.record_rate_limited()
        logger.warning("rate_limited", identifier=identifier, path=request.url.path)
        raise RateLimitError("Too many requests. Please try again later.", limiter.reset_time(identifier))
    return identifier


def session_token(request: Request, settings: SettingsDep) -> str | None:
    return request.cookies.get(settings.session_cookie)


def optional_user(users: Users, token: Annotated[str | None, Depends(session_token)]) -> User | None:
    return users.validate_session(token) if token else None


def current_user(users: Users, token: Annotated[str | None, Depends(session_token)]) -> User:
    """
    Signed-in user from the session cookie.

    Raises:
        AuthenticationError: No session cookie
        SessionExpiredError: Unknown or expired session
    """
    if not token:
        raise AuthenticationError("Please sign in to use this feature")
    user = users.validate_session(token)
    if user is None:
        raise SessionExpiredError("Your session has expired. Please sign in again.")
    return user


CurrentUser = Annotated[User, Depends(current_user)]
OptionalUser = Annotated[User | None, Depends(optional_user)]


async def api_limited_user(user: CurrentUser, users: Users) -> AsyncGenerator[User, None]:
    """
    Signed-in user with plan allowance left.

    The call is counted once the endpoint returns without raising.

    Raises:
        ApiLimitError: Plan allowance used up
    """
    if not user.has_quota:
        logger.warning("api_limit_exceeded", user_id=user.id, used=user.api_calls, limit=user.max_api_calls)
        raise ApiLimitError(user.api_calls, user.max_api_calls, user.plan)

    yield user

    users.increment_api_calls(user.id)


ApiLimitedUser = Annotated[User, Depends(api_limited_user)]

