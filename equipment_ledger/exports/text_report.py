"""
Human-Readable Accounting Report

Plain-text rendition of the accounting report: title, period, export
date, financial summary, then every operation newest first with its
equipment and person labels.
"""

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from pathlib import Path
from typing import Optional

from equipment_ledger.exports.files import generate_file_name, write_destination
from equipment_ledger.models.export import ComptabiliteExport, Period, PeriodKind


MONTH_NAMES = [
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
]

REPORT_TITLE = "Rapport Comptabilité"


def period_label(period: Period) -> str:
    if period.kind == PeriodKind.MONTH:
        return f"Période: {MONTH_NAMES[period.month - 1]} {period.year}"
    if period.kind == PeriodKind.YEAR:
        return f"Période: Année {period.year}"
    return "Période: Historique complet"


def _money(amount: Decimal, currency_symbol: str) -> str:
    return f"{amount:.2f} {currency_symbol}"


def render_report(
    export: ComptabiliteExport,
    period: Period,
    tz: Optional[tzinfo] = None,
    currency_symbol: str = "€",
) -> str:
    """
    Render an export as report text.

    Dates are shown in tz (UTC by default). The operation list is sorted
    by descending date; operations sharing a date keep their export order.
    """
    tz = tz or timezone.utc
    exported_at = export.date_export.astimezone(tz)

    lines = [
        REPORT_TITLE,
        "=" * len(REPORT_TITLE),
        period_label(period),
        f"Exporté le {exported_at:%d/%m/%Y à %H:%M}",
        "",
        "Résumé Financier",
        "----------------",
        f"Revenus: {_money(export.total_revenus, currency_symbol)}",
        f"Dépenses: {_money(export.total_depenses, currency_symbol)}",
        f"Bénéfice net: {_money(export.benefice_net, currency_symbol)}",
        "",
        "Détail des opérations",
        "---------------------",
    ]

    if not export.operations:
        lines.append("Aucune opération")

    for op in sorted(export.operations, key=lambda op: op.date, reverse=True):
        prefix = "+" if op.is_revenue else "-"
        lines.append(
            f"{op.date.astimezone(tz):%d/%m/%Y} - {op.operation_type.value}: "
            f"{prefix}{_money(op.amount, currency_symbol)}"
        )
        if op.materiel_nom:
            lines.append(f"   Matériel: {op.materiel_nom}")
        if op.personne_nom:
            lines.append(f"   Personne: {op.personne_nom}")

    return "\n".join(lines) + "\n"


def write_report(
    export: ComptabiliteExport,
    period: Period,
    directory: Path,
    tz: Optional[tzinfo] = None,
    currency_symbol: str = "€",
    now: Optional[datetime] = None,
    prefix: str = "comptabilite",
) -> Path:
    """
    Write the report as a timestamped .txt file in directory.

    Raises:
        WriteError: the file cannot be written
    """
    text = render_report(export, period, tz=tz, currency_symbol=currency_symbol)
    file_name = generate_file_name("txt", now or export.date_export, prefix=prefix)
    return write_destination(directory, file_name, text.encode("utf-8"))
