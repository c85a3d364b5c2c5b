import csv
import logging
from decimal import Decimal, Inexact
from pathlib import Path
from typing import Dict, Iterable, Sequence

from rxledger.models.ledger import RatioTable, ZERO
from rxledger.utils.ledger_validation import (
    LEDGER_PRECISION,
    MalformedRatioRow,
    RatioSumMismatch,
    exact_context,
    normalize_user,
    parse_decimal,
)

logger = logging.getLogger(__name__)

ONE = Decimal(1)


def load_ratio_rows(rows: Iterable[Sequence[str]]) -> RatioTable:
    """
    Build a RatioTable from (user, ratio) rows.

    Rules:
    - every non-empty row has exactly two fields
    - every ratio is an exact decimal
    - the ratios sum to exactly 1, no tolerance and no rounding
    - users are uppercased; a repeated user keeps its last ratio
    """
    ratios: Dict[str, Decimal] = {}

    for row in rows:
        if not row:
            continue

        user = normalize_user(row[0])
        if len(row) != 2:
            raise MalformedRatioRow(f"{user}: ratio not found.")

        ratio = parse_decimal(row[1])
        if user in ratios:
            logger.warning("Duplicate ratio row for %s, keeping %s", user, ratio)
        ratios[user] = ratio

    try:
        with exact_context():
            total = sum(ratios.values(), ZERO)
    except Inexact:
        raise RatioSumMismatch(f"sum of ratios != 1 (exceeds {LEDGER_PRECISION} digits).")

    if total != ONE:
        raise RatioSumMismatch(f"sum of ratios != 1 (got {total}).")

    return RatioTable(ratios=ratios)


def load_ratio_file(path: str | Path) -> RatioTable:
    """Load the tab separated ratio file once at startup."""
    with open(path, newline="") as f:
        table = load_ratio_rows(csv.reader(f, delimiter="\t"))

    logger.info("Loaded ratio table for %d users from %s", len(table.ratios), path)
    return table
