"""Command-line interface for threadedtest."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from threadedtest import __version__
from threadedtest.config import ThreadedTestConfig, create_example_config, get_default_config
from threadedtest.core.result import RunSummary


console = Console()


def print_banner() -> None:
    """Print the threadedtest banner."""
    console.print(
        Panel.fit(
            "[bold blue]threadedtest[/bold blue] - multi-threaded test runner",
            subtitle=f"v{__version__}",
        )
    )


@click.group()
@click.version_option(version=__version__, prog_name="threadedtest")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: threadedtest.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """threadedtest - discover, select and run tests across Python modules.

    Single-threaded tests run serially per module; everything else runs
    on a thread pool.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="threadedtest.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init(ctx: click.Context, output: str, force: bool) -> None:
    """Initialize a new threadedtest configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {output_path}"
        )
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
        console.print("\nNext steps:")
        console.print("  1. List your test modules under run.modules")
        console.print("  2. Run [bold]threadedtest run[/bold] to execute tests")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("modules", nargs=-1)
@click.option(
    "--test",
    "-t",
    "patterns",
    multiple=True,
    help="Run only this test or package of tests (repeatable)",
)
@click.option("--single", "-s", is_flag=True, help="Run all tests in one thread")
@click.option("--threads", type=click.IntRange(min=1), help="Number of worker threads")
@click.option("--list", "-l", "list_only", is_flag=True, help="List selected tests without running them")
@click.option("--no-builtin", is_flag=True, help="Do not collect doctests")
@click.pass_context
def run(
    ctx: click.Context,
    modules: tuple[str, ...],
    patterns: tuple[str, ...],
    single: bool,
    threads: Optional[int],
    list_only: bool,
    no_builtin: bool,
) -> None:
    """Discover and run tests in MODULES (default: modules from the config)."""
    print_banner()

    config_path = ctx.obj.get("config_path")
    verbose = ctx.obj.get("verbose", False)

    # Load configuration; without one, modules on the command line are enough
    try:
        if config_path:
            config = ThreadedTestConfig.from_file(config_path)
        else:
            config = ThreadedTestConfig.find_and_load()
        if verbose:
            console.print(f"[dim]Loaded config for project:[/dim] {config.project.name}")
    except FileNotFoundError as e:
        if config_path or not modules:
            console.print(f"[red]Error:[/red] {e}")
            console.print("Run [bold]threadedtest init[/bold] to create a configuration file")
            sys.exit(1)
        config = get_default_config()

    from threadedtest.core.builtin import install_builtin_tests
    from threadedtest.core.discovery import TestDiscovery
    from threadedtest.core.factory import TestFactory
    from threadedtest.core.failures import DiscoveryError
    from threadedtest.core.runner import TestRunner

    base_dir = Path(config_path).parent if config_path else Path.cwd()
    for entry in reversed(config.get_python_path(base_dir)):
        if str(entry) not in sys.path:
            sys.path.insert(0, str(entry))

    module_names = list(modules) or config.run.modules
    selection = list(patterns) or config.run.tests
    if not module_names:
        console.print("[red]Error:[/red] No test modules given")
        sys.exit(1)

    discovery = TestDiscovery(test_prefix=config.run.test_prefix)
    try:
        # Doctests can only be collected from modules that are loaded
        resolved = [discovery.resolve(name) for name in module_names]
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if config.run.builtin_tests and not no_builtin:
        install_builtin_tests(internal_namespace=config.run.internal_namespace)

    tests = TestFactory(discovery=discovery).create_tests(resolved, selection)

    if list_only:
        _display_test_list([t.get_path() for t in tests])
        return

    if not tests:
        console.print("[yellow]No tests selected[/yellow]")
        return

    runner = TestRunner(
        threads=threads or config.run.threads,
        single_threaded=single or config.run.single_threaded,
        verbose=verbose,
        console=console,
    )
    summary = runner.run(tests)

    _display_results_summary(summary)

    # Exit with appropriate code
    if not summary.success:
        sys.exit(1)


def _display_test_list(paths: list[str]) -> None:
    """Display the selected test paths."""
    table = Table(title=f"Selected Tests ({len(paths)})")
    table.add_column("Path", style="cyan")
    for path in sorted(paths):
        table.add_row(escape(path))
    console.print(table)


def _display_results_summary(summary: RunSummary) -> None:
    """Display a summary of test results."""
    console.print("\n" + "=" * 50)
    console.print("[bold]Test Results Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Total Tests", str(summary.total))
    table.add_row("Passed", f"[green]{summary.passed}[/green]")
    table.add_row("Failed", f"[red]{summary.failed}[/red]")
    table.add_row("Duration", f"{summary.duration_ms}ms")

    if summary.total > 0:
        pass_rate = (summary.passed / summary.total) * 100
        table.add_row("Pass Rate", f"{pass_rate:.1f}%")

    console.print(table)

    if summary.failed > 0:
        console.print("\n[red]Some tests failed![/red]")
        console.print("\nFailed tests:")
        for result in summary.failed_results:
            console.print(f"  [red]✗[/red] {escape(result.path)}")
            for failure in result.failures:
                location = f" [dim]({escape(failure.location)})[/dim]" if failure.location else ""
                console.print(f"      {escape(failure.path)}: {escape(failure.message)}{location}")
    else:
        console.print("\n[green]All tests passed![/green]")


if __name__ == "__main__":
    main()
