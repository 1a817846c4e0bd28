"""CLI commands for lilybear."""

import asyncio

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from lilybear import __logo__, __version__
from lilybear.bridge.parser import parse_external_command
from lilybear.bridge.relay import RelayBridge
from lilybear.bus.events import BROADCAST, RelayCommand
from lilybear.config.schema import Config
from lilybear.errors import ParseError
from lilybear.utils.helpers import join_url

app = typer.Typer(
    name="lilybear",
    help=f"{__logo__} lilybear - whisper bus and relay for the council",
    no_args_is_help=True,
)
council_app = typer.Typer(name="council", help="ShadowFlower council utilities", no_args_is_help=True)
report_app = typer.Typer(name="report", help="Council reporting utilities", no_args_is_help=True)
council_app.add_typer(report_app, name="report")
app.add_typer(council_app, name="council")

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} lilybear v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """lilybear - whisper bus and relay for the council."""
    pass


def _load() -> Config:
    from lilybear.config.loader import load_config

    return load_config()


def _server_url(config: Config, url: str | None) -> str:
    """URL of the process hosting the bus: --url, relay.targetUrl, then server.*."""
    if url:
        return url
    if config.relay.target_url:
        return config.relay.target_url
    return f"http://{config.server.host}:{config.server.port}"


def _send(config: Config, url: str | None, cmd: RelayCommand) -> bool:
    relay_cfg = config.relay.model_copy(update={"target_url": _server_url(config, url)})
    return asyncio.run(RelayBridge(relay_cfg).ingest(cmd))


# ============================================================================
# Onboard / Setup
# ============================================================================


@app.command()
def onboard():
    """Write a config file with the default council."""
    from lilybear.config.loader import get_config_path, load_config, save_config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if typer.confirm("Overwrite with defaults?"):
            save_config(Config(), config_path)
            console.print(f"[green]✓[/green] Config reset to defaults: {config_path}")
        else:
            save_config(load_config(config_path), config_path)
            console.print(f"[green]✓[/green] Config refreshed, existing values preserved: {config_path}")
    else:
        save_config(Config(), config_path)
        console.print(f"[green]✓[/green] Created config at {config_path}")

    console.print(f"\n{__logo__} lilybear is ready! Start the council with: lilybear serve")


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: server.host)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: server.port)"),
):
    """Start the bus, the council and the ingestion endpoint."""
    import uvicorn

    from lilybear.runtime import Runtime

    config = _load()
    runtime = Runtime.build(config)
    bind_host = host or config.server.host
    bind_port = port or config.server.port

    console.print(f"{__logo__} Starting lilybear on {bind_host}:{bind_port}")
    console.print(f"[green]✓[/green] Council: {', '.join(a.name for a in runtime.agents) or '(empty)'}")
    if config.relay.outbound_url:
        console.print(f"[green]✓[/green] Outbound relay: {config.relay.outbound_url}")

    async def run():
        await runtime.start()
        server = uvicorn.Server(
            uvicorn.Config(runtime.app, host=bind_host, port=bind_port, log_level="info")
        )
        try:
            await server.serve()
        finally:
            await runtime.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\nGoodbye!")


# ============================================================================
# Whispers
# ============================================================================


@app.command()
def whisper(
    to: str = typer.Argument(..., help="Addressee, or '*' for everyone"),
    message: str = typer.Argument(..., help="Text to whisper"),
    sender: str = typer.Option("cli", "--from", "-f", help="Sender name"),
    url: str | None = typer.Option(None, "--url", help="Relay target (default from config)"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show lilybear runtime logs"),
):
    """Whisper to a council member through a running server."""
    if not logs:
        logger.disable("lilybear")
    if not to.strip() or not message.strip():
        console.print("[red]Error: addressee and message must not be empty[/red]")
        raise typer.Exit(1)

    config = _load()
    cmd = RelayCommand(sender=sender, to=to.strip(), body=message.strip())
    if not _send(config, url, cmd):
        console.print(f"[red]Failed to deliver whisper to {cmd.to}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {cmd.sender} → {cmd.to}: {cmd.body}")


@app.command()
def relay(
    raw: str = typer.Argument(..., help="Chat line such as '!Serafina bless the hall'"),
    sender: str = typer.Option("cli", "--from", "-f", help="Sender name"),
    url: str | None = typer.Option(None, "--url", help="Relay target (default from config)"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show lilybear runtime logs"),
):
    """Parse a chat-style relay command and send it."""
    if not logs:
        logger.disable("lilybear")
    config = _load()
    try:
        cmd = parse_external_command(raw, sender=sender, marker=config.relay.marker)
    except ParseError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    target = "everyone" if cmd.to == BROADCAST else cmd.to
    if not _send(config, url, cmd):
        console.print(f"[red]Failed to deliver whisper to {target}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Relayed to {target}: {cmd.body}")


@app.command()
def agents():
    """List the configured council."""
    config = _load()

    table = Table(title="Council")
    table.add_column("Name", style="cyan")
    table.add_column("Role")
    table.add_column("Enabled")
    table.add_column("Rules")

    for agent in config.agents:
        rules = ", ".join(f"{r.match}:{r.pattern.strip()}→{r.to}" for r in agent.rules) or "-"
        table.add_row(agent.name, agent.role, "✓" if agent.enabled else "✗", rules)

    console.print(table)


# ============================================================================
# Council report
# ============================================================================


@report_app.command("now")
def report_now(
    sender: str = typer.Option("cli", "--from", "-f", help="Sender name"),
    url: str | None = typer.Option(None, "--url", help="Server URL (default from config)"),
):
    """Post the nightly council report immediately."""
    config = _load()
    endpoint = join_url(_server_url(config, url), "/commands")
    try:
        response = httpx.post(
            endpoint,
            json={"command": "council report now", "from": sender},
            timeout=config.relay.timeout_seconds,
        )
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(response.json().get("message", "Accepted"))
