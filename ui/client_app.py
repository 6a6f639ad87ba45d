"""RAWBOT owner client - terminal rendition of the store owner's app"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich import box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from rawbot.client import ClientViewState, SubscriptionBand
from rawbot.client import messages
from rawbot.stores.bot_store import BotStore
from rawbot.utils.exceptions import BotNotFoundError
from rawbot.utils.logger import setup_logging

console = Console()


class ConsoleAlertSignal:
    """Terminal bell + notification panel standing in for the ringtone and OS notification."""

    def __init__(self, out: Console):
        self.console = out
        self.ringing = False

    def start_ring(self) -> None:
        self.ringing = True
        self.console.bell()

    def stop_ring(self) -> None:
        self.ringing = False

    def notify(self, title: str, body: str) -> None:
        self.console.print(Panel(body, title=title, border_style="green"))


def _format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    return value[:10]


def render_locked(view: ClientViewState) -> Panel:
    body = Group(
        Align.center(Text(messages.LOCKED_TITLE, style="bold white")),
        Text(""),
        Align.center(Text(messages.LOCKED_PROMPT.format(store_name=view.bot.store_name), style="dim")),
        Text(""),
        Align.center(Text(view.error, style="bold red")) if view.error else Text(""),
    )
    return Panel(body, title="🔒 RAWBOT", subtitle="RAWBOT v2.5 Secure System", border_style="blue", box=box.DOUBLE)


def render_alert(view: ClientViewState) -> Optional[Panel]:
    if not view.active_alert:
        return None
    body = Group(
        Text(messages.HOT_LEAD_BODY, style="bold"),
        Text(""),
        Text(f"\"{view.active_alert.user_message}\"", style="italic"),
        Text(""),
        Text(f"[a] {messages.HOT_LEAD_ACCEPT}", style="bold green"),
    )
    return Panel(body, title=messages.HOT_LEAD_TITLE, border_style="bold green", box=box.HEAVY)


def render_banner(view: ClientViewState) -> Optional[Panel]:
    if view.banner is None:
        return None
    style = "white on red" if view.band is SubscriptionBand.EXPIRED else "white on yellow"
    return Panel(Align.center(Text(view.banner, style="bold")), style=style)


def render_control_tab(view: ClientViewState) -> Table:
    bot = view.bot
    table = Table(title=messages.TAB_CONTROL, box=box.ROUNDED, show_header=False)
    table.add_column("Control", style="cyan", width=24)
    table.add_column("Value", width=36)

    disabled = "" if view.controls_enabled else " [dim](disabled)[/dim]"
    table.add_row("[s] Power", ("[green]ON[/green]" if bot.is_active else "[red]OFF[/red]") + disabled)
    table.add_row("[l] Listening", ("[green]ON[/green]" if bot.is_listening else "[red]OFF[/red]") + disabled)
    table.add_row("[t] Tone", f"{bot.tone_value} - {view.tone_label}")
    table.add_row("[c] Command", view.notice or "-")
    table.add_row("[u] Upload knowledge", view.upload_feedback or "-")
    return table


def render_settings_tab(view: ClientViewState) -> Table:
    bot = view.bot
    table = Table(title=messages.TAB_SETTINGS, box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan", width=24)
    table.add_column("Value", width=36)

    expiry_style = "red" if view.band is not SubscriptionBand.NORMAL else "white"
    table.add_row("Bot Name", bot.bot_name or "-")
    table.add_row("License Key", bot.license_key or "-")
    table.add_row("Activation date", _format_date(bot.activation_date))
    table.add_row("Expiry date", f"[{expiry_style}]{_format_date(bot.subscription_end_date)}[/{expiry_style}]")
    table.add_row("Instagram", f"@{bot.instagram_username}" if bot.instagram_connected else "-")
    table.add_row("Device ID", f"{bot.id}-SECURE")
    return table


def render_unlocked(view: ClientViewState) -> Group:
    parts = []
    alert = render_alert(view)
    if alert is not None:
        parts.append(alert)
    banner = render_banner(view)
    if banner is not None:
        parts.append(banner)

    status_style = "green" if view.bot.is_active and not view.is_expired else "red"
    parts.append(
        Panel(
            Text.assemble((view.bot.store_name or view.bot.id, "bold"), "  ", (view.status_label, status_style)),
            subtitle=f"[1] {messages.TAB_CONTROL}  [2] {messages.TAB_SETTINGS}",
            border_style="blue",
        )
    )
    if view.active_tab == "control":
        parts.append(render_control_tab(view))
    else:
        parts.append(render_settings_tab(view))
    return Group(*parts)


def render(view: ClientViewState):
    return render_locked(view) if view.is_locked else render_unlocked(view)


class RawbotClientApp:
    """Prompt loop driving a ClientViewState"""

    def __init__(self, view: ClientViewState, out: Console = console):
        self.view = view
        self.console = out
        self.running = True

    def locked_step(self) -> None:
        key = Prompt.ask("License Key (RWB-XXXX-XXXX), or 'q' to quit", console=self.console)
        if key.strip().lower() == "q":
            self.running = False
            return
        if not self.view.can_submit_key(key):
            return
        if self.view.activate(key.upper()):
            self.view.start()

    def unlocked_step(self) -> None:
        choices = ["1", "2", "s", "l", "t", "c", "u", "r", "q"]
        if self.view.active_alert:
            choices.append("a")
        choice = Prompt.ask("Select option", choices=choices, default="r", console=self.console)

        if choice == "1":
            self.view.select_tab("control")
        elif choice == "2":
            self.view.select_tab("settings")
        elif choice == "s":
            self.view.toggle_status()
        elif choice == "l":
            self.view.toggle_listening()
        elif choice == "t":
            value = Prompt.ask("Tone (0-100)", default=str(self.view.bot.tone_value), console=self.console)
            try:
                self.view.set_tone(int(value))
            except ValueError:
                self.console.print("[red]Tone must be a number between 0 and 100[/red]")
        elif choice == "c":
            self.view.send_command(Prompt.ask("Command", console=self.console))
        elif choice == "u":
            path = Path(Prompt.ask("File path", console=self.console)).expanduser()
            try:
                data = path.read_bytes()
            except OSError:
                self.view.upload_feedback = messages.UPLOAD_FAILED
            else:
                self.view.upload_knowledge(path.name, data)
        elif choice == "r":
            self.view.refresh()
        elif choice == "a":
            self.view.dismiss_alert()
        elif choice == "q":
            self.running = False

    def run(self) -> None:
        if not self.view.is_locked:
            self.view.start()
        try:
            while self.running:
                self.console.clear()
                self.console.print(render(self.view))
                if self.view.is_locked:
                    self.locked_step()
                else:
                    self.unlocked_step()
        finally:
            self.view.stop()


def main(argv: Optional[list] = None) -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="RAWBOT owner client")
    parser.add_argument("bot_id", help="Bot document id")
    parser.add_argument("--data-dir", default=os.getenv("RAWBOT_DATA_DIR", "data"))
    args = parser.parse_args(argv)

    setup_logging(os.getenv("LOG_LEVEL", "WARNING"))
    store = BotStore(Path(args.data_dir))
    try:
        view = ClientViewState.load(store, args.bot_id, signal=ConsoleAlertSignal(console))
    except BotNotFoundError as e:
        console.print(f"[bold red]{e}[/bold red]")
        sys.exit(1)
    RawbotClientApp(view).run()


if __name__ == "__main__":
    main()
