"""
Data Export

Builds the backup document offered to the user.

DESIGN DECISION: The export carries every collection, including goals,
debts and accounts, so a backup is complete.
"""

from datetime import datetime, timezone
from typing import Optional

from finance_tracker.models.finance import ExportBundle, FinanceSnapshot


def build_export(
    snapshot: FinanceSnapshot,
    now: Optional[datetime] = None,
) -> ExportBundle:
    """Bundle a snapshot into an ExportBundle stamped with the export time."""
    return ExportBundle(
        settings=snapshot.settings,
        subscriptions=list(snapshot.subscriptions),
        transactions=list(snapshot.transactions),
        goals=list(snapshot.goals),
        debts=list(snapshot.debts),
        accounts=list(snapshot.accounts),
        export_date=now or datetime.now(timezone.utc),
    )


def export_to_json(bundle: ExportBundle) -> str:
    """Serialize a bundle as indented JSON."""
    return bundle.model_dump_json(indent=2)
