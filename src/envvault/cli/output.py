"""Rich output formatting helpers."""

from rich.table import Table

from envvault.security.orchestrator import EncryptionReport


def create_report_table(
    report: EncryptionReport, title: str = "Encryption Report"
) -> Table:
    """Build a table summarizing an encryption run.

    Args:
        report: Result of the run.
        title: Table title.

    Returns:
        Configured Rich Table.
    """
    table = Table(title=title)
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", style="magenta", justify="right")
    table.add_column("Variables")

    rows = [
        ("Encrypted", report.encrypted),
        ("Re-encrypted", report.re_encrypted),
        ("Already encrypted", report.skipped_encrypted),
        ("Empty (skipped)", report.skipped_empty),
        ("Not found", report.not_found),
    ]
    for label, names in rows:
        table.add_row(label, str(len(names)), ", ".join(names))
    return table


def create_verification_table(results: dict[str, bool]) -> Table:
    """Build a table of variable encryption status."""
    table = Table(title="Encryption Status")
    table.add_column("Variable", style="cyan")
    table.add_column("Status", style="bold")
    for name, encrypted in results.items():
        if encrypted:
            table.add_row(name, "[green]✓ encrypted[/green]")
        else:
            table.add_row(name, "[red]✗ plaintext[/red]")
    return table


def mask_value(value: str, visible: int = 4) -> str:
    """Hide all but the first ``visible`` characters of a value."""
    if len(value) <= visible:
        return "*" * len(value)
    return value[:visible] + "*" * 6
