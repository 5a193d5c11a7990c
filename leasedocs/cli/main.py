"""Main CLI application"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as FormError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from leasedocs.cli.init_cmd import init_command
from leasedocs.errors import LeasedocsError
from leasedocs.models.contract import (
    ContractForm,
    ContractKind,
    Counterpart,
    FixedCompensation,
    PercentageCompensation,
    PropertyInfo,
)
from leasedocs.models.document import (
    Credential,
    DocumentFilter,
    DocumentStatus,
    DocumentType,
    DownloadFormat,
)
from leasedocs.models.template import TemplateFilter, TemplateType
from leasedocs.utils.config import get_settings

app = typer.Typer(
    name="leasedocs",
    help="Document templates, contract generation and document lifecycle",
    add_completion=False,
)

console = Console(force_terminal=True)

STATUS_STYLES = {
    DocumentStatus.DRAFT: "yellow",
    DocumentStatus.PENDING: "blue",
    DocumentStatus.ACTIVE: "green",
    DocumentStatus.INACTIVE: "dim",
    DocumentStatus.REJECTED: "red",
}


def _fail(message: str):
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(code=1)


def _services():
    """Build the template store and document service on the configured database"""
    from leasedocs.db import get_database
    from leasedocs.services.documents import DocumentService
    from leasedocs.services.template_store import TemplateStore

    db = get_database()
    templates = TemplateStore(db)
    return templates, DocumentService(db, templates=templates)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
):
    """Configure logging before any command runs"""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command("init")
def init():
    """Initialize database and upload storage"""
    if not init_command():
        raise typer.Exit(code=1)


@app.command("templates")
def templates(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Match name or description"),
    template_type: Optional[TemplateType] = typer.Option(None, "--type", "-t", help="Template type"),
):
    """List document templates"""
    store, _ = _services()
    template_list = store.list(TemplateFilter(search_text=search, type=template_type))

    if not template_list:
        console.print("[yellow]No templates found[/yellow]")
        return

    table = Table(title="Document Templates")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Variables")
    table.add_column("Used", justify="right")
    table.add_column("Active")

    for template in template_list:
        table.add_row(
            template.id[:8],
            template.name,
            template.type.value,
            ", ".join(template.variables) or "-",
            str(template.usage_count),
            "Yes" if template.is_active else "No",
        )

    console.print(table)
    stats = store.stats()
    console.print(f"\n{stats.active} of {stats.total} templates active")


@app.command("template-add")
def template_add(
    name: str = typer.Option(..., "--name", "-n", help="Template name"),
    description: str = typer.Option(..., "--description", "-d", help="Short description"),
    body_file: Path = typer.Option(..., "--body-file", "-f", help="File holding the template body"),
    template_type: TemplateType = typer.Option(TemplateType.LEASE, "--type", "-t", help="Template type"),
):
    """Add a template from a file"""
    if not body_file.is_file():
        _fail(f"File not found: {body_file}")
    store, _ = _services()
    try:
        template = store.create(
            name=name,
            type=template_type,
            description=description,
            body=body_file.read_text(encoding="utf-8"),
        )
    except LeasedocsError as e:
        _fail(e.message)

    console.print(f"[green][OK] Created template {template.id}[/green]")
    if template.variables:
        console.print(f"Variables: [cyan]{', '.join(template.variables)}[/cyan]")


@app.command("variables")
def variables(
    body_file: Path = typer.Argument(..., help="File to scan for {{PLACEHOLDER}} tokens"),
):
    """Show the placeholders a body contains"""
    from leasedocs.services.variables import extract_variables

    if not body_file.is_file():
        _fail(f"File not found: {body_file}")
    names = extract_variables(body_file.read_text(encoding="utf-8"))
    if not names:
        console.print("[yellow]No variables found[/yellow]")
        return
    for variable_name in names:
        console.print(f"  [cyan]{{{{{variable_name}}}}}[/cyan]")


@app.command("contract")
def contract(
    kind: ContractKind = typer.Option(..., "--kind", "-k", help="manager or tenant"),
    counterpart_id: str = typer.Option(..., "--counterpart-id", help="Manager or tenant id"),
    counterpart_name: str = typer.Option(..., "--counterpart-name", help="Manager or tenant name"),
    counterpart_email: Optional[str] = typer.Option(None, "--counterpart-email"),
    property_id: str = typer.Option(..., "--property-id"),
    property_name: str = typer.Option(..., "--property-name"),
    address: str = typer.Option("", "--address"),
    city: str = typer.Option("", "--city"),
    state: str = typer.Option("", "--state"),
    postal_code: str = typer.Option("", "--postal-code"),
    country: str = typer.Option("", "--country"),
    currency: Optional[str] = typer.Option(None, "--currency", help="ISO code, e.g. USD"),
    start: Optional[str] = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
    end: Optional[str] = typer.Option(None, "--end", help="End date YYYY-MM-DD"),
    amount: Optional[str] = typer.Option(None, "--amount", help="Fixed monthly fee or rent"),
    percent: Optional[str] = typer.Option(None, "--percent", help="Share of monthly revenue"),
    responsibilities: str = typer.Option("", "--responsibilities", "-r", help="One per line"),
    template_id: Optional[str] = typer.Option(None, "--template", help="Template to record usage on"),
    user: str = typer.Option("cli", "--user", "-u", help="Acting user id"),
):
    """Generate a contract and save it as a draft document"""
    if (amount is None) == (percent is None):
        _fail("Give exactly one of --amount or --percent")

    try:
        compensation = (
            FixedCompensation(amount=amount) if amount is not None
            else PercentageCompensation(percent=percent)
        )
        form = ContractForm(
            kind=kind,
            counterpart=Counterpart(id=counterpart_id, name=counterpart_name, email=counterpart_email),
            property=PropertyInfo(
                id=property_id, name=property_name, address=address, city=city,
                state=state, postal_code=postal_code, country=country, currency=currency,
            ),
            start_date=date.fromisoformat(start) if start else None,
            end_date=date.fromisoformat(end) if end else None,
            compensation=compensation,
            responsibilities=responsibilities.replace("\\n", "\n"),
            template_id=template_id,
        )
    except (FormError, ValueError) as e:
        _fail(str(e))

    _, service = _services()
    try:
        document = service.generate_contract(Credential(user_id=user), form)
    except LeasedocsError as e:
        _fail(e.message)

    console.print(Panel(
        f"[bold]{document.name}[/bold]\n\n"
        f"ID: {document.id}\nStatus: {document.status.value}\nCategory: {document.category}",
        title="Draft contract created",
        border_style="green",
    ))


@app.command("documents")
def documents(
    status: Optional[DocumentStatus] = typer.Option(None, "--status", help="Filter by status"),
    document_type: Optional[DocumentType] = typer.Option(None, "--type", "-t", help="Filter by type"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Match name, description, category"),
):
    """List documents"""
    _, service = _services()
    document_list = service.list(DocumentFilter(status=status, type=document_type, search=search))

    if not document_list:
        console.print("[yellow]No documents found[/yellow]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Status")
    table.add_column("Created")

    for document in document_list:
        style = STATUS_STYLES.get(document.status, "white")
        table.add_row(
            document.id,
            document.name,
            document.type.value,
            f"[{style}]{document.status.value}[/{style}]",
            document.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)
    stats = service.stats()
    console.print(f"\n{stats.total} documents, {stats.recent} in the last 30 days")


@app.command("send")
def send(
    document_id: str = typer.Argument(..., help="Draft document id"),
    user: str = typer.Option("cli", "--user", "-u", help="Acting user id"),
):
    """Send a draft contract for signature"""
    _, service = _services()
    try:
        document = service.send_for_signature(Credential(user_id=user), document_id)
    except LeasedocsError as e:
        _fail(e.message)
    console.print(f"[green][OK] {document.name} is now {document.status.value}[/green]")


@app.command("download")
def download(
    document_id: str = typer.Argument(..., help="Document id"),
    fmt: DownloadFormat = typer.Option(DownloadFormat.PDF, "--format", "-f", help="pdf or docx"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    user: str = typer.Option("cli", "--user", "-u", help="Acting user id"),
):
    """Download a document as PDF or DOCX"""
    _, service = _services()
    try:
        result = service.download(Credential(user_id=user), document_id, fmt)
    except LeasedocsError as e:
        _fail(e.message)

    path = output or Path(result.filename)
    path.write_bytes(result.data)
    console.print(f"[green][OK] Saved {path} ({len(result.data)} bytes)[/green]")


@app.command("db")
def db_command(
    action: str = typer.Argument(..., help="Action: migrate, status"),
):
    """Manage the database schema"""
    from leasedocs.db import get_database
    from leasedocs.db.sqlite import init_db

    if action == "migrate":
        init_db()
        console.print("[green]SQLite database initialized.[/green]")

    elif action == "status":
        status = get_database().get_status()
        table = Table(title=f"Database Status ({status['mode']})")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for k, v in status.items():
            table.add_row(str(k), str(v))
        console.print(table)

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Available actions: migrate, status")
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port", "-p"),
):
    """Run the HTTP API"""
    import uvicorn

    uvicorn.run("leasedocs.api.app:create_app", host=host, port=port, factory=True)


if __name__ == "__main__":
    app()
