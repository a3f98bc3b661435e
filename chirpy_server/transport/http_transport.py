"""
HTTP Transport for the Chirpy API

Module: transport.http_transport
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] HTTP Transport Implementation
  - aiohttp application with JSON API routes
  - CORS, hit counter and error mapping middlewares
  - Static file serving under /app
  - Core calls dispatched to worker threads

ARCHITECTURE:
Handlers decode a typed request record, call the core through
run_in_executor (the core is blocking and thread-safe), and encode the
result. The ServiceContext is stored on the application and reached
through request.app[CONTEXT_KEY].

Error mapping (core exception -> HTTP status):
  NotFoundError            404
  DuplicateEmailError      409
  AuthFailedError          401
  UnauthorizedError (all)  401
  ForbiddenError           403
  InvalidPostError         400
  RequestValidationError   400
  persistence errors       500

SECURITY NOTES:
- All token kinds collapse to one 401 message; logs keep the precise kind
- Webhook API key compared in constant time
- CORS open to any origin (public read API)
"""

import asyncio
import functools
import hmac
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from aiohttp import web

from ..content.post_manager import ForbiddenError, InvalidPostError, validate_body
from ..core.constants import (
    AUTH_SCHEME_API_KEY,
    AUTH_SCHEME_BEARER,
    CORS_HEADERS,
    METRICS_PAGE_TEMPLATE,
)
from ..core.context import ServiceContext
from ..persistence.codec import CorruptDataError
from ..persistence.document_store import DuplicateEmailError, NotFoundError
from ..persistence.json_store import JSONStoreError
from ..security.authentication.account_manager import AuthFailedError
from ..security.authentication.jwt_handler import UnauthorizedError
from .schemas import ChirpRequest, CredentialsRequest, PolkaWebhookRequest, RequestValidationError


CONTEXT_KEY = web.AppKey("context", ServiceContext)

STATIC_PREFIX = "/app"

_ERROR_STATUS = (
    (NotFoundError, 404),
    (DuplicateEmailError, 409),
    (AuthFailedError, 401),
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (InvalidPostError, 400),
    (RequestValidationError, 400),
    (JSONStoreError, 500),
    (CorruptDataError, 500),
)

logger = logging.getLogger("transport.http")


# ============================================================================
# Helpers
# ============================================================================

def _status_for(exc: Exception) -> Optional[int]:
    for error_type, status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return None


def _public_message(exc: Exception, status: int) -> str:
    if status >= 500:
        return "Something went wrong"
    if isinstance(exc, UnauthorizedError):
        return "Unauthorized"
    return str(exc)


def respond_with_error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking core call on the default thread pool"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


async def read_json(request: web.Request) -> Any:
    """
    Raises:
        RequestValidationError: If body is not valid JSON
    """
    try:
        return await request.json()
    except ValueError:
        raise RequestValidationError("Request body must be valid JSON")


def auth_credential(request: web.Request, scheme: str) -> str:
    """
    Extract "<scheme> <credential>" from the Authorization header

    Raises:
        UnauthorizedError: If the header is missing or uses another scheme
    """
    header = request.headers.get("Authorization", "")
    prefix = f"{scheme} "
    credential = header[len(prefix):].strip() if header.startswith(prefix) else ""
    if not credential:
        raise UnauthorizedError(f"Missing {scheme} authorization")
    return credential


async def authenticated_account_id(request: web.Request) -> int:
    """Validate the bearer access token and return its account id"""
    context = request.app[CONTEXT_KEY]
    token = auth_credential(request, AUTH_SCHEME_BEARER)
    return await run_blocking(context.tokens.validate_access_token, token)


# ============================================================================
# Middlewares
# ============================================================================

@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Add CORS headers; answer preflight requests directly"""
    if request.method == "OPTIONS":
        return web.Response(status=200, headers=CORS_HEADERS)

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def hits_middleware(request: web.Request, handler):
    """Count requests for the static site"""
    if request.path == STATIC_PREFIX or request.path.startswith(STATIC_PREFIX + "/"):
        request.app[CONTEXT_KEY].register_hit()
    return await handler(request)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Translate core exceptions into JSON error responses"""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        status = _status_for(exc)
        if status is None:
            raise

        if status >= 500:
            logger.error(f"{request.method} {request.path} failed: {exc}", exc_info=True)
        else:
            logger.info(
                f"{request.method} {request.path} -> {status} "
                f"({type(exc).__name__}: {exc})"
            )
        return respond_with_error(status, _public_message(exc, status))


# ============================================================================
# Admin / utility handlers
# ============================================================================

async def handle_healthz(request: web.Request) -> web.Response:
    return web.Response(text="OK", content_type="text/plain")


async def handle_metrics(request: web.Request) -> web.Response:
    hits = request.app[CONTEXT_KEY].hit_count
    return web.Response(
        text=METRICS_PAGE_TEMPLATE.format(hits=hits),
        content_type="text/html",
    )


async def handle_reset(request: web.Request) -> web.Response:
    request.app[CONTEXT_KEY].reset_hits()
    logger.info("Hit counter reset")
    return web.Response(text="Hits have been reset", content_type="text/html")


async def handle_app_index(request: web.Request) -> web.StreamResponse:
    index = Path(request.app[CONTEXT_KEY].config.static_root) / "index.html"
    if not index.is_file():
        raise web.HTTPNotFound()
    return web.FileResponse(index)


# ============================================================================
# Account handlers
# ============================================================================

async def handle_create_user(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    params = CredentialsRequest.from_json(await read_json(request))

    account = await run_blocking(context.accounts.create_account, params.email, params.password)
    return web.json_response(account.to_public_dict(), status=201)


async def handle_update_user(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    account_id = await authenticated_account_id(request)
    params = CredentialsRequest.from_json(await read_json(request))

    account = await run_blocking(
        context.accounts.update_profile, account_id, params.email, params.password
    )
    return web.json_response(account.to_public_dict())


async def handle_login(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    params = CredentialsRequest.from_json(await read_json(request))

    account = await run_blocking(context.accounts.verify_credential, params.email, params.password)
    tokens = await run_blocking(context.tokens.issue_session_pair, account.id)

    body = account.to_public_dict()
    body["token"] = tokens.access_token
    body["refresh_token"] = tokens.refresh_token
    return web.json_response(body)


async def handle_refresh(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    refresh_token = auth_credential(request, AUTH_SCHEME_BEARER)

    try:
        access_token = await run_blocking(context.tokens.refresh_access_token, refresh_token)
    except NotFoundError as e:
        raise UnauthorizedError(f"Unknown refresh token: {e}") from e
    return web.json_response({"token": access_token})


async def handle_revoke(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    refresh_token = auth_credential(request, AUTH_SCHEME_BEARER)

    try:
        await run_blocking(context.tokens.revoke, refresh_token)
    except NotFoundError as e:
        raise UnauthorizedError(f"Unknown refresh token: {e}") from e
    return web.Response(status=204)


async def handle_polka_webhook(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    api_key = auth_credential(request, AUTH_SCHEME_API_KEY)
    expected = context.config.polka_api_key
    if not expected or not hmac.compare_digest(api_key.encode(), expected.encode()):
        raise UnauthorizedError("Wrong API key")

    params = PolkaWebhookRequest.from_json(await read_json(request))
    if not params.is_user_upgrade:
        logger.info(f"Ignoring webhook event {params.event!r}")
        return web.Response(status=204)

    await run_blocking(context.accounts.upgrade_tier, params.user_id)
    return web.Response(status=204)


# ============================================================================
# Chirp handlers
# ============================================================================

async def handle_create_chirp(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    account_id = await authenticated_account_id(request)
    params = ChirpRequest.from_json(await read_json(request))

    post = await run_blocking(context.posts.create_post, account_id, params.body)
    return web.json_response(post.to_dict(), status=201)


async def handle_list_chirps(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]

    author_id = None
    raw_author = request.query.get("author_id")
    if raw_author is not None:
        if not (raw_author.isascii() and raw_author.isdigit()):
            raise RequestValidationError("author_id must be an integer")
        author_id = int(raw_author)

    sort = request.query.get("sort", "asc")
    if sort not in ("asc", "desc"):
        raise RequestValidationError("sort must be 'asc' or 'desc'")

    posts = await run_blocking(
        context.posts.list_posts, author_id=author_id, descending=(sort == "desc")
    )
    return web.json_response([post.to_dict() for post in posts])


async def handle_get_chirp(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    post = await run_blocking(context.posts.get_post, int(request.match_info["chirp_id"]))
    return web.json_response(post.to_dict())


async def handle_delete_chirp(request: web.Request) -> web.Response:
    context = request.app[CONTEXT_KEY]
    account_id = await authenticated_account_id(request)

    await run_blocking(
        context.posts.delete_post, int(request.match_info["chirp_id"]), account_id
    )
    return web.Response(status=204)


async def handle_validate_chirp(request: web.Request) -> web.Response:
    params = ChirpRequest.from_json(await read_json(request))
    return web.json_response({"cleaned_body": validate_body(params.body)})


# ============================================================================
# Application
# ============================================================================

def create_app(context: ServiceContext) -> web.Application:
    """Build the aiohttp application around a ServiceContext"""
    app = web.Application(middlewares=[cors_middleware, hits_middleware, error_middleware])
    app[CONTEXT_KEY] = context

    app.router.add_get("/api/healthz", handle_healthz)
    app.router.add_get("/api/reset", handle_reset)
    app.router.add_get("/admin/metrics", handle_metrics)

    app.router.add_post("/api/users", handle_create_user)
    app.router.add_put("/api/users", handle_update_user)
    app.router.add_post("/api/login", handle_login)
    app.router.add_post("/api/refresh", handle_refresh)
    app.router.add_post("/api/revoke", handle_revoke)
    app.router.add_post("/api/polka/webhooks", handle_polka_webhook)

    app.router.add_post("/api/chirps", handle_create_chirp)
    app.router.add_get("/api/chirps", handle_list_chirps)
    app.router.add_get(r"/api/chirps/{chirp_id:\d+}", handle_get_chirp)
    app.router.add_delete(r"/api/chirps/{chirp_id:\d+}", handle_delete_chirp)
    app.router.add_post("/api/validate_chirp", handle_validate_chirp)

    app.router.add_get(STATIC_PREFIX, handle_app_index)
    app.router.add_get(STATIC_PREFIX + "/", handle_app_index)
    static_root = Path(context.config.static_root)
    if static_root.is_dir():
        app.router.add_static(STATIC_PREFIX, static_root)
    else:
        logger.warning(f"Static root {static_root} is not a directory, /app disabled")

    return app


class HTTPTransport:
    """
    HTTP server for the Chirpy API

    Owns the aiohttp runner and site; the application itself comes from
    create_app().
    """

    def __init__(self, context: ServiceContext):
        """
        Initialize HTTP Transport

        Args:
            context: Service context shared by all handlers
        """
        self.context = context
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.logger = logging.getLogger("transport.http")
        self.is_running = False

    async def start(self) -> None:
        """Start the HTTP server"""
        config = self.context.config
        try:
            self.app = create_app(self.context)

            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, config.host, config.port)
            await site.start()

            self.is_running = True
            self.logger.info(f"HTTP server started on {config.host}:{config.port}")

        except Exception as e:
            self.logger.error(f"Server startup failed: {e}")
            self.is_running = False
            raise

    async def stop(self) -> None:
        """Stop the HTTP server"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        self.is_running = False
        self.logger.info("HTTP transport stopped")
