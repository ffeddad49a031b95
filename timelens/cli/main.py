import logging

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config.manager import ConfigManager
from ..database.connection import DatabaseManager
from ..models.enums import Category, CATEGORY_COLORS
from ..nlp.classifier import get_classifier
from ..services.analytics import AnalyticsWindow, aggregate, weekly_breakdown
from ..services.event_store import EventStore

console = Console()
config_manager = ConfigManager()


@click.group()
@click.option('--env-file', '-c', help='Path to a .env file')
def cli(env_file):
    """TimeLens - see where your time goes"""
    global config_manager
    if env_file:
        config_manager = ConfigManager(env_file)
    logging.basicConfig(level=getattr(logging, config_manager.get('development.log_level', 'INFO'), logging.INFO))


@cli.command()
@click.option('--host', default=None, help='Bind address')
@click.option('--port', default=None, type=int, help='Port')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(host, port, reload):
    """Run the HTTP API"""
    import uvicorn

    config_manager.validate()
    uvicorn.run(
        "timelens.api.main:create_app",
        factory=True,
        host=host or config_manager.get('server.host'),
        port=port or config_manager.get('server.port'),
        reload=reload,
        log_level=config_manager.get('development.log_level', 'INFO').lower(),
    )


@cli.command()
@click.argument('title')
@click.option('--description', '-d', default=None, help='Event description')
def classify(title, description):
    """Show the category an event title gets"""
    classifier = get_classifier(config_manager)
    result = classifier.classify(title, description)

    color = CATEGORY_COLORS[result.category]
    console.print(
        f"[bold]{title}[/bold] -> [{color}]{result.category.value}[/] "
        f"(confidence: {result.confidence.value})"
    )


@cli.command('init-db')
def init_db():
    """Create database tables and list them"""
    database_url = config_manager.get('app.database_url')
    db = DatabaseManager(database_url)
    tables = db.table_names()
    console.print(f"[green]Database ready:[/green] {database_url}")
    for table in tables:
        console.print(f"  - {table}")


@cli.command()
@click.option('--username', '-u', default=None, help='User to report on (defaults to the demo user)')
@click.option('--days', '-d', default=None, type=int, help='Size of the trailing window in days')
def report(username, days):
    """Print time allocation and daily trends"""
    username = username or config_manager.get('app.demo_username')
    if not username:
        raise click.ClickException("No username given and demo mode is off")

    db = DatabaseManager(config_manager.get('app.database_url'))
    with db.get_session() as session:
        store = EventStore(session)
        user = store.get_user_by_username(username)
        if not user:
            raise click.ClickException(f"No user named {username}")

        window = AnalyticsWindow.trailing(
            days=days or config_manager.get('app.analytics_days', 7),
            timezone=config_manager.get('app.timezone', 'UTC'),
        )
        snapshot = aggregate(store.list_events_for_user(user.id, since=window.since), window)

    metrics = snapshot.metrics
    console.print(Panel.fit(
        f"Total hours: [bold]{metrics.total_hours}[/bold]\n"
        f"Events: [bold]{metrics.events_count}[/bold]\n"
        f"Most productive day: [bold]{metrics.most_productive_day}[/bold]",
        title=f"Last {days or config_manager.get('app.analytics_days', 7)} days for {username}"
    ))

    if not snapshot.time_allocation:
        console.print("[yellow]No events in this window[/yellow]")
        return

    allocation = Table(show_header=True, header_style="bold magenta", title="Time allocation")
    allocation.add_column("Category")
    allocation.add_column("Hours", justify="right")
    for entry in snapshot.time_allocation:
        allocation.add_row(f"[{entry.color}]{entry.category.value}[/]", str(entry.hours))
    console.print(allocation)

    weekly = Table(show_header=True, header_style="bold magenta", title="Weekly breakdown")
    weekly.add_column("Day", style="dim")
    for category in Category:
        weekly.add_column(category.value, justify="right")
    for row in weekly_breakdown(snapshot.trends):
        weekly.add_row(row['day'], *[str(row[category.value]) for category in Category])
    console.print(weekly)


@cli.command('check-config')
def check_config():
    """Validate configuration"""
    config_manager.validate()


@cli.command('set-secret')
@click.argument('name', type=click.Choice(['openai_api_key', 'google_client_id', 'google_client_secret']))
def set_secret(name):
    """Store a secret in the system keyring"""
    value = click.prompt(f"Value for {name}", hide_input=True)
    config_manager.save_secret(name, value)
    console.print(f"[green]Saved {name} to the keyring[/green]")


if __name__ == '__main__':
    cli()
