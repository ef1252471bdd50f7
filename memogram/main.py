"""Application entry point.

Builds the Telegram bot application and runs it either behind an aiohttp web
server (webhook mode, for production) or with long polling (for local
development when no public webhook address is configured). Configures
logging and registers bot handlers for commands, messages and buttons.
"""

import logging

from aiohttp import web
from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from .bot.handlers import (
    PIPELINE_KEY,
    handle_callback,
    handle_content,
    handle_error,
    list_command,
    start,
)
from .bot.messages import BOT_COMMANDS
from .bot.types import SetupResult
from .core.container import Container
from .services.album_store import RedisAlbumStore
from .services.telegram import ALLOWED_UPDATES, TelegramClient

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/telegram/webhook"

APPLICATION_KEY = web.AppKey("application", Application)
CONTAINER_KEY = web.AppKey("container", Container)


def build_application(container: Container, with_updater: bool = True) -> Application:
    """Create the python-telegram-bot application and register handlers.

    Args:
        container: DI container; its bot dependency is bound to the new application.
        with_updater: Whether to build an updater for long polling.

    Returns:
        Configured Application, not yet initialized.
    """
    config = container.config()
    builder = Application.builder().token(config.bot.bot_token)
    if not with_updater:
        builder = builder.updater(None)
    application = builder.build()

    container.bot.override(application.bot)
    application.bot_data[PIPELINE_KEY] = container.pipeline()

    application.add_handler(CommandHandler(["start", "help"], start))
    application.add_handler(CommandHandler("list", list_command))
    application.add_handler(MessageHandler(filters.UpdateType.MESSAGE, handle_content))
    application.add_handler(CallbackQueryHandler(handle_callback))
    application.add_error_handler(handle_error)
    return application


async def setup_bot(telegram: TelegramClient, webhook_url: str) -> SetupResult:
    """Register the webhook and the command menu with Telegram.

    Returns:
        Webhook URL and the outcome of both registration calls.
    """
    webhook_result = await telegram.set_webhook(webhook_url)
    commands_result = await telegram.set_commands(BOT_COMMANDS)
    logger.info(f"Webhook set to {webhook_url}: {webhook_result.ok}, commands: {commands_result.ok}")
    return SetupResult(
        webhookUrl=webhook_url,
        setWebhook=webhook_result.model_dump(exclude_none=True),
        setCommands=commands_result.model_dump(exclude_none=True),
    )


async def connect_resources(container: Container) -> None:
    store = container.album_store()
    if isinstance(store, RedisAlbumStore):
        await store.connect()


async def healthz(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def telegram_setup(request: web.Request) -> web.Response:
    """Register the webhook, defaulting to this server's own webhook route."""
    container = request.app[CONTAINER_KEY]
    configured = container.config().bot.public_webhook_url
    webhook_url = configured or f"{request.scheme}://{request.host}{WEBHOOK_PATH}"
    result = await setup_bot(container.telegram_client(), webhook_url)
    return web.json_response(result)


async def telegram_webhook(request: web.Request) -> web.Response:
    """Accept one Telegram update and process it before answering."""
    application = request.app[APPLICATION_KEY]
    try:
        data = await request.json()
    except ValueError:
        logger.warning("Webhook received invalid JSON")
        return web.Response(status=400, text="Bad request")

    if not isinstance(data, dict):
        return web.Response(status=400, text="Bad request")
    try:
        update = Update.de_json(data, application.bot)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Webhook received unparseable update: {e}")
        return web.Response(status=400, text="Bad request")
    if update is None:
        return web.Response(status=400, text="Bad request")

    await application.process_update(update)
    return web.Response(text="ok")


def create_web_app(application: Application, container: Container) -> web.Application:
    """Build the aiohttp application serving health, setup and webhook routes.

    The Telegram application is initialized when the server starts and shut
    down with it, together with the album store.
    """
    app = web.Application()
    app[APPLICATION_KEY] = application
    app[CONTAINER_KEY] = container

    app.router.add_get("/healthz", healthz)
    app.router.add_route("GET", "/telegram/setup", telegram_setup)
    app.router.add_route("POST", "/telegram/setup", telegram_setup)
    app.router.add_post(WEBHOOK_PATH, telegram_webhook)

    async def on_startup(app: web.Application) -> None:
        await application.initialize()
        await connect_resources(container)

    async def on_cleanup(app: web.Application) -> None:
        await application.shutdown()
        await container.album_store().close()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)
    return app


def main() -> None:
    """Main application entry point.

    Loads configuration, sets up logging and starts the bot in either
    webhook mode (production) or polling mode (development).
    """
    container = Container()
    config = container.config()

    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.bot.log_level.upper(), logging.INFO),
    )

    if config.bot.use_webhook:
        application = build_application(container, with_updater=False)
        web_app = create_web_app(application, container)
        webhook_url = config.bot.public_webhook_url

        async def register_webhook(app: web.Application) -> None:
            if webhook_url:
                await setup_bot(container.telegram_client(), webhook_url)

        web_app.on_startup.append(register_webhook)
        logger.info(f"Starting webhook server on {config.bot.listen_host}:{config.bot.port}")
        web.run_app(web_app, host=config.bot.listen_host, port=config.bot.port)
    else:
        application = build_application(container)

        async def post_init(application: Application) -> None:
            await connect_resources(container)
            await container.telegram_client().set_commands(BOT_COMMANDS)

        async def post_shutdown(application: Application) -> None:
            await container.album_store().close()

        application.post_init = post_init
        application.post_shutdown = post_shutdown

        logger.warning("No public webhook address configured; falling back to long-polling")
        application.run_polling(allowed_updates=ALLOWED_UPDATES)


if __name__ == "__main__":
    main()
