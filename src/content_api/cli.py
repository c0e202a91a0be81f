# cli.py
import logging
import sys

import click
import pydantic

from content_api.config.settings import get_settings
from content_api.dependencies import build_stores
from content_api.services import GalleryService, NewsService

# Configure logging
logger = logging.getLogger(__name__)


def _load_settings():
    """Settings or exit 1; a bad configuration must never start anything."""
    try:
        return get_settings()
    except pydantic.ValidationError as e:
        click.echo(f"Invalid configuration:\n{e}", err=True)
        sys.exit(1)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _connect(settings):
    try:
        return build_stores(settings)
    except Exception as e:
        logger.error(f"Failed to connect to storage: {e}")
        sys.exit(1)


@click.group()
def cli():
    """CLI commands for the content API"""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST)")
@click.option("--port", default=None, type=int, help="Bind port (defaults to PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only)")
def serve(host, port, reload):
    """Run the API server"""
    import uvicorn
    from content_api.main import create_app

    settings = _load_settings()
    _configure_logging(settings.log_level)

    stores = _connect(settings)

    # The interpreter still exits with status 1 after the hook returns
    def close_on_crash(exc_type, exc, tb):
        logger.critical("Uncaught exception, shutting down", exc_info=(exc_type, exc, tb))
        stores.close()

    sys.excepthook = close_on_crash

    host = host or settings.host
    port = port or settings.port
    logger.info(f"Starting {settings.app_name} on {host}:{port} ({settings.environment})")
    if reload:
        stores.close()
        uvicorn.run(
            "content_api.main:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        )
        return

    try:
        uvicorn.run(
            create_app(settings, stores=stores),
            host=host,
            port=port,
            timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        )
    finally:
        stores.close()


@cli.command()
def show_config():
    """Show current configuration"""
    settings = _load_settings()

    print("Current Configuration:")
    for key, value in settings.public_summary().items():
        print(f"  {key}: {value}")


@cli.command()
def init_db():
    """Create collections and indexes"""
    settings = _load_settings()
    _configure_logging(settings.log_level)
    stores = _connect(settings)
    try:
        stores.records.init_collections()
        print(f"Collections initialized ({settings.storage_mode})")
    finally:
        stores.close()


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def cleanup(yes):
    """Delete every gallery and news item and all stored images"""
    settings = _load_settings()
    _configure_logging(settings.log_level)
    if not yes:
        click.confirm("This deletes all gallery items, news items and images. Continue?", abort=True)

    stores = _connect(settings)
    try:
        stores.records.init_collections()
        gallery_count = GalleryService(stores.records, stores.blobs).delete_all()
        news_count = NewsService(stores.records, stores.blobs).delete_all()
        # Blobs no record pointed at, e.g. left behind by a failed create
        orphan_count = stores.blobs.delete_all()
        print(f"Deleted {gallery_count} gallery items")
        print(f"Deleted {news_count} news items")
        print(f"Deleted {orphan_count} orphaned images")
    finally:
        stores.close()


if __name__ == "__main__":
    cli()
