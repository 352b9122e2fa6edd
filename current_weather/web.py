# ABOUTME: ASGI web entry point serving weather pages and the module settings form.
# ABOUTME: Creates a Starlette app whose handlers take their HTTP client and config store from WeatherDeps.

import logging
import os
import secrets
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from current_weather.config_store import ConfigStoreError
from current_weather.deps import WeatherDeps, create_deps
from current_weather.models import ErrorKind, LocationQuery, WeatherError
from current_weather.presentation import page_title, to_display
from current_weather.settings_form import parse_settings_form, validate_settings
from current_weather.weather_service import lookup_weather

logger = logging.getLogger(__name__)

ADMIN_TOKEN_HEADER = "x-admin-token"
SETTINGS_PATH = "/admin/settings"
WEATHER_PATH = "/weather"

NOT_FOUND = {"detail": "Not Found"}
SETTINGS_HINT = f"Please check out module settings page: {SETTINGS_PATH}"
SAVE_FAILED = "Something went wrong. Please try again later."


def preferred_language(request: Request) -> str:
    """First Accept-Language tag in provider form (lower-case, "pt-BR" -> "pt_br"), default "en"."""
    header = request.headers.get("accept-language", "")
    tag = header.split(",")[0].split(";")[0].strip().lower().replace("-", "_")
    if not tag or tag == "*":
        return "en"
    return tag


def is_admin(request: Request, deps: WeatherDeps) -> bool:
    """True when the request carries the configured admin token."""
    expected = deps.settings.admin_token
    if not expected:
        return False
    supplied = request.headers.get(ADMIN_TOKEN_HEADER, "")
    return secrets.compare_digest(supplied.encode(), expected.encode())


def log_lookup_error(error: WeatherError, query: LocationQuery) -> None:
    """Log key and upstream failures as errors, configuration and not-found as info."""
    level = logging.ERROR if error.kind in (ErrorKind.INVALID_API_KEY, ErrorKind.UPSTREAM_ERROR) else logging.INFO
    location = query.model_dump(exclude_none=True) or "default location"
    logger.log(level, f"Weather lookup failed for {location} ({error.kind.value}): {error.message}")


def not_found_response(error: WeatherError, query: LocationQuery, admin: bool) -> JSONResponse:
    """Every lookup failure is a 404; administrators on the default page also get a settings hint."""
    content = dict(NOT_FOUND)
    if admin and query.is_empty:
        content["message"] = SETTINGS_HINT
        content["error"] = error.message
    return JSONResponse(content, status_code=404)


async def weather_page(request: Request) -> JSONResponse:
    """Public weather page for the path's location or the configured default."""
    deps: WeatherDeps = request.app.state.deps
    query = LocationQuery.from_path(request.path_params.get("city"), request.path_params.get("country"))

    try:
        config = deps.config_store.load()
    except ConfigStoreError:
        logger.exception("Could not load module configuration")
        return JSONResponse(NOT_FOUND, status_code=404)

    outcome = await lookup_weather(
        deps.http_client,
        config,
        query,
        lang=preferred_language(request),
        base_url=deps.settings.api_url,
    )
    if isinstance(outcome, WeatherError):
        log_lookup_error(outcome, query)
        return not_found_response(outcome, query, is_admin(request, deps))

    return JSONResponse({"title": page_title(outcome), "weather": to_display(outcome).model_dump()})


async def settings_page(request: Request) -> JSONResponse:
    """Read (GET) or validate and save (POST) the module settings; administrators only."""
    deps: WeatherDeps = request.app.state.deps
    if not is_admin(request, deps):
        return JSONResponse({"detail": "Forbidden"}, status_code=403)

    if request.method == "GET":
        try:
            config = deps.config_store.load()
        except ConfigStoreError:
            logger.exception("Could not load module configuration")
            return JSONResponse({"detail": SAVE_FAILED}, status_code=500)
        return JSONResponse({"config": config.model_dump(mode="json")})

    form_data = await request.form()
    form, errors = parse_settings_form(form_data)
    if form is None:
        return JSONResponse({"errors": errors}, status_code=422)

    outcome = await validate_settings(
        deps.http_client, form, lang=preferred_language(request), base_url=deps.settings.api_url
    )
    if not outcome.is_valid:
        return JSONResponse({"errors": outcome.errors}, status_code=422)

    try:
        deps.config_store.save(outcome.config)
    except ConfigStoreError:
        logger.exception("Could not save module configuration")
        return JSONResponse({"detail": SAVE_FAILED}, status_code=500)

    return JSONResponse(
        {
            "message": f"Configuration saved! You may check weather on this page: {WEATHER_PATH}",
            "config": outcome.config.model_dump(mode="json"),
        }
    )


def create_app(deps: WeatherDeps | None = None) -> Starlette:
    """Build the ASGI app. Without explicit deps, settings are read from the environment."""
    deps = deps or create_deps()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info(f"Starting current weather service, config at {deps.config_store.path}")
        yield
        logger.info("Shutting down current weather service")
        await deps.http_client.aclose()

    app = Starlette(
        routes=[
            Route(WEATHER_PATH, weather_page, methods=["GET"]),
            Route(WEATHER_PATH + "/{city}", weather_page, methods=["GET"]),
            Route(WEATHER_PATH + "/{city}/{country}", weather_page, methods=["GET"]),
            Route(SETTINGS_PATH, settings_page, methods=["GET", "POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.deps = deps
    return app


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for console output at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    """Run the app under uvicorn with settings from the environment."""
    import uvicorn

    deps = create_deps()
    configure_logging(deps.settings.log_level)
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(create_app(deps), host=host, port=port, log_level=deps.settings.log_level.lower())


if __name__ == "__main__":
    main()
