import click
import uvicorn

from symvora.core.config import get_settings


@click.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST setting)")
@click.option("--port", default=None, type=int, help="Bind port (defaults to PORT setting)")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes")
@click.option("--log-level", default=None, help="Log level (defaults to LOG_LEVEL setting)")
def main(host, port, reload, log_level):
    """Run the symptom advisory API server."""
    settings = get_settings()
    host = host or settings.HOST
    port = port or settings.PORT
    log_level = (log_level or settings.LOG_LEVEL).lower()
    click.echo(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    uvicorn.run("symvora.main:app", host=host, port=port, reload=reload, log_level=log_level)
