"""Init command implementation"""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from leasedocs.db.sqlite import init_db
from leasedocs.utils.config import get_settings

console = Console()


def init_command():
    """Initialize database and upload storage"""
    console.print(Panel.fit(
        "[bold blue]Initializing Leasedocs[/bold blue]",
        border_style="blue"
    ))
    settings = get_settings()

    console.print("\n[yellow]1. Initializing SQLite database...[/yellow]")
    try:
        init_db()
        console.print(f"[green]   [OK] SQLite database ready at {settings.database_path}[/green]")
    except Exception as e:
        console.print(f"[red]   [FAIL] Failed to initialize SQLite: {e}[/red]")
        return False

    console.print("\n[yellow]2. Preparing upload storage...[/yellow]")
    try:
        Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
        console.print(f"[green]   [OK] Uploads stored in {settings.storage_path}[/green]")
    except OSError as e:
        console.print(f"[red]   [FAIL] Failed to create storage directory: {e}[/red]")
        return False

    console.print(Panel.fit(
        "[bold green][OK] Initialization complete![/bold green]\n\n"
        "Next steps:\n"
        "1. Add a template: [cyan]python -m leasedocs template-add --name ... --body-file ...[/cyan]\n"
        "2. Generate a contract: [cyan]python -m leasedocs contract --kind manager ...[/cyan]",
        border_style="green"
    ))
    return True
