"""Main CLI entry point for the simplo command."""

import math
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from .. import __version__
from ..accounts import AccountService, AppConfigService
from ..analytics import AnalyticsService, DATE_RANGES
from ..core.config import settings
from ..landing_pages import LandingPageService
from ..leads import DEFAULT_PAGE_SIZE, LeadExporter, LeadService
from ..storage import Database

console = Console()


def get_db(db_path: Optional[str] = None) -> Database:
    """Get database instance."""
    return Database(db_path or settings.db_path)


@click.group()
@click.version_option(version=__version__, prog_name="simplo")
def cli():
    """Simplo Pages - landing pages and lead capture.

    \b
    Quick Start:
      simplo init                          # Create the database
      simplo create-user                   # Add a dashboard account
      simplo serve                         # Start the API and public pages
      simplo leads --export xlsx           # Download captured leads
    """
    pass


# ============================================================================
# SETUP
# ============================================================================

@cli.command()
@click.option("--db", "db_path", help="Custom database path")
def init(db_path: Optional[str]):
    """Create the database and the default workspace settings."""
    db = get_db(db_path)
    config = AppConfigService(db).get()

    console.print(Panel.fit(
        f"[green]✓ Database initialized![/green]\n\n"
        f"Location: [cyan]{db.db_path}[/cyan]\n"
        f"Site name: [cyan]{config.site_name}[/cyan]\n\n"
        f"[bold]Next steps:[/bold]\n"
        f"1. [yellow]simplo create-user[/yellow]\n"
        f"2. [yellow]simplo serve[/yellow]\n"
        f"3. [yellow]simplo api-key --regenerate[/yellow]  (integration access)\n\n"
        f"[dim]Run 'simplo --help' for all commands[/dim]",
        title=f"Simplo Pages v{__version__}"
    ))


@cli.command()
@click.option("--host", default=None, help="Bind address (default from SIMPLO_HOST)")
@click.option("--port", type=int, default=None, help="Port (default from SIMPLO_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP server."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port
    console.print(f"[green]Serving on http://{host}:{port}[/green]")
    uvicorn.run("simplo_pages.api.main:app", host=host, port=port, reload=reload)


@cli.command("create-user")
@click.option("--email", prompt="Email", help="Account email")
@click.option("--password", prompt="Password", hide_input=True, confirmation_prompt=True,
              help="Account password")
@click.option("--name", default=None, help="Display name")
@click.option("--db", "db_path", help="Custom database path")
def create_user(email: str, password: str, name: Optional[str], db_path: Optional[str]):
    """Create a dashboard account."""
    accounts = AccountService(get_db(db_path))
    try:
        user = accounts.register(email, password, name=name)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"[green]✓ Created user {user.email}[/green] [dim]({user.id})[/dim]")


# ============================================================================
# PAGES & LEADS
# ============================================================================

@cli.command()
@click.option("--db", "db_path", help="Custom database path")
def pages(db_path: Optional[str]):
    """List landing pages with their lead counts."""
    db = get_db(db_path)
    landing_pages = LandingPageService(db).list_for_user(None)
    leads = LeadService(db)

    if not landing_pages:
        console.print("[yellow]No landing pages yet.[/yellow]")
        return

    table = Table(title=f"Landing Pages ({len(landing_pages)})")
    table.add_column("Title", style="cyan", max_width=30)
    table.add_column("Slug")
    table.add_column("Status", justify="center")
    table.add_column("Form")
    table.add_column("Leads", justify="right", style="bold")
    table.add_column("Created", style="dim")

    for page in landing_pages:
        status = "[green]published[/green]" if page.published else "[dim]draft[/dim]"
        table.add_row(
            page.title[:30],
            f"/{page.slug}",
            status,
            page.form_type,
            str(leads.count_for_page(page.id)),
            page.created_at.strftime("%d/%m/%Y"),
        )

    console.print(table)


@cli.command("leads")
@click.option("--page", "-p", "page_number", default=1, help="Page of results")
@click.option("--limit", "-n", default=DEFAULT_PAGE_SIZE, help="Leads per page")
@click.option("--landing-page", "landing_page_id", help="Filter by landing page id")
@click.option("--export", "export_format", type=click.Choice(["csv", "xlsx"]),
              help="Write all matching leads to a file instead of listing them")
@click.option("--output", "-o", type=click.Path(), help="Export file path")
@click.option("--db", "db_path", help="Custom database path")
def list_leads(page_number: int, limit: int, landing_page_id: Optional[str],
               export_format: Optional[str], output: Optional[str], db_path: Optional[str]):
    """Show captured leads, newest first, or export them."""
    service = LeadService(get_db(db_path))

    if export_format:
        exporter = LeadExporter(service.list_leads(landing_page_id=landing_page_id))
        path = Path(output or exporter.filename(export_format))
        if export_format == "csv":
            path.write_text(exporter.to_csv(), encoding="utf-8")
        else:
            path.write_bytes(exporter.to_xlsx())
        console.print(f"[green]✓ Exported {len(exporter.leads)} leads to {path}[/green]")
        return

    try:
        leads, total = service.query(page=page_number, limit=limit, landing_page_id=landing_page_id)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    if not leads:
        console.print("[yellow]No leads found.[/yellow]")
        return

    total_pages = math.ceil(total / limit)
    table = Table(title=f"Leads - page {page_number}/{total_pages} ({total} total)")
    table.add_column("Captured", style="dim")
    table.add_column("Name", style="cyan", max_width=25)
    table.add_column("Email", max_width=30)
    table.add_column("Phone")
    table.add_column("Landing Page", max_width=30)

    for lead in leads:
        table.add_row(
            lead.created_at.strftime("%d/%m/%Y %H:%M"),
            str(lead.display_name)[:25],
            str(lead.data.get("email", ""))[:30],
            str(lead.data.get("phone", "")),
            (lead.landing_page_title or "N/A")[:30],
        )

    console.print(table)


@cli.command()
@click.option("--days", "-d", default="30", type=click.Choice([str(d) for d in DATE_RANGES]),
              help="Reporting period in days")
@click.option("--db", "db_path", help="Custom database path")
def analytics(days: str, db_path: Optional[str]):
    """Show visitors, leads and conversion per landing page."""
    db = get_db(db_path)
    service = AnalyticsService(db)
    metrics = service.page_metrics(days=int(days))
    summary = service.dashboard_summary()

    console.print(Panel.fit(
        f"[bold]Landing pages:[/bold] {summary['total_pages']} "
        f"({summary['published_pages']} published)\n"
        f"[bold]Total leads:[/bold] {summary['total_leads']}\n"
        f"[bold]Leads (last 7 days):[/bold] {summary['leads_last_7_days']}\n"
        f"[bold]Total views:[/bold] {summary['total_views']}",
        title="📊 Overview"
    ))

    if not metrics:
        return

    table = Table(title=f"Last {days} days")
    table.add_column("Landing Page", style="cyan", max_width=30)
    table.add_column("Visitors", justify="right")
    table.add_column("Leads", justify="right")
    table.add_column("Conversion", justify="right", style="bold")
    table.add_column("Avg time (s)", justify="right")
    table.add_column("Google", justify="right", style="dim")
    table.add_column("Facebook", justify="right", style="dim")
    table.add_column("Instagram", justify="right", style="dim")
    table.add_column("Other", justify="right", style="dim")

    for m in metrics:
        table.add_row(
            m.landing_page_title[:30],
            str(m.total_visitors),
            str(m.total_leads),
            f"{m.conversion_rate}%",
            str(m.avg_duration_seconds),
            str(m.visitors_from_google),
            str(m.visitors_from_facebook),
            str(m.visitors_from_instagram),
            str(m.visitors_from_other),
        )

    console.print(table)


# ============================================================================
# INTEGRATION
# ============================================================================

@cli.command("api-key")
@click.option("--regenerate", is_flag=True, help="Issue a new key (the old one stops working)")
@click.option("--revoke", is_flag=True, help="Disable integration access")
@click.option("--db", "db_path", help="Custom database path")
def api_key(regenerate: bool, revoke: bool, db_path: Optional[str]):
    """Show, regenerate or revoke the integration API key."""
    config = AppConfigService(get_db(db_path))

    if revoke:
        if Confirm.ask("Revoke the integration API key?"):
            config.revoke_api_key()
            console.print("[green]✓ API key revoked[/green]")
        return

    if regenerate:
        key = config.regenerate_api_key()
        console.print(f"[green]✓ New API key:[/green] [bold]{key}[/bold]")
        console.print("[dim]Send it in the x-api-key header to /api/leads[/dim]")
        return

    key = config.get().integration_api_key
    if key:
        console.print(f"API key: [bold]{key}[/bold]")
    else:
        console.print("[yellow]No API key yet. Run 'simplo api-key --regenerate'.[/yellow]")


if __name__ == "__main__":
    cli()
