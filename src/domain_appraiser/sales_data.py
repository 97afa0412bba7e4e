"""
Historical domain sales.

Ships a small curated sample and loads larger datasets from a tab-separated
file with a header row of domain, price, date and venue.
"""

import csv
from pathlib import Path

from .exceptions import PersistenceError
from .models import ComparableSale


SAMPLE_SALES: tuple[ComparableSale, ...] = (
    # Finance/Crypto
    ComparableSale("cryptowallet.com", 250_000, "2023-08-15", "NameBio"),
    ComparableSale("bitcoinexchange.com", 175_000, "2023-06-22", "Sedo"),
    ComparableSale("financepro.com", 85_000, "2023-09-10", "GoDaddy"),
    ComparableSale("payfast.com", 95_000, "2023-07-18", "NameBio"),
    # Tech/AI
    ComparableSale("aitools.com", 125_000, "2023-05-20", "Flippa"),
    ComparableSale("smartapp.com", 65_000, "2023-08-03", "Sedo"),
    ComparableSale("cloudtech.com", 78_000, "2023-06-15", "GoDaddy"),
    ComparableSale("databot.com", 45_000, "2023-09-25", "NameBio"),
    # E-commerce
    ComparableSale("shopfast.com", 55_000, "2023-07-08", "Flippa"),
    ComparableSale("buyeasy.com", 42_000, "2023-06-30", "Sedo"),
    ComparableSale("marketpro.com", 68_000, "2023-08-12", "GoDaddy"),
    # Health
    ComparableSale("healthapp.com", 72_000, "2023-05-15", "NameBio"),
    ComparableSale("medcare.com", 85_000, "2023-07-22", "Sedo"),
    ComparableSale("wellness.io", 35_000, "2023-08-28", "Flippa"),
    # Travel
    ComparableSale("travelfast.com", 48_000, "2023-06-12", "GoDaddy"),
    ComparableSale("hotelbook.com", 62_000, "2023-09-05", "NameBio"),
    ComparableSale("flightdeal.com", 38_000, "2023-07-20", "Sedo"),
    # Business
    ComparableSale("bizpro.com", 52_000, "2023-08-18", "Flippa"),
    ComparableSale("worktech.com", 45_000, "2023-06-25", "GoDaddy"),
    # Short/Premium
    ComparableSale("ace.com", 750_000, "2023-04-10", "Private Sale"),
    ComparableSale("zap.com", 425_000, "2023-05-08", "Private Sale"),
    ComparableSale("hub.io", 185_000, "2023-07-15", "NameBio"),
)


def load_sales_tsv(path: Path) -> list[ComparableSale]:
    """
    Load sales from a TSV file.

    Rows with a missing domain, a non-positive or unparseable price or a
    missing date are skipped.

    Raises:
        PersistenceError: If the file cannot be read
    """
    sales = []
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f, delimiter="\t")
            for row in reader:
                domain = (row.get("domain") or "").strip().lower()
                date = (row.get("date") or "").strip()
                venue = (row.get("venue") or "").strip() or "Unknown"
                try:
                    price = int(float(row.get("price") or ""))
                except ValueError:
                    continue
                if not domain or "." not in domain or not date or price <= 0:
                    continue
                sales.append(ComparableSale(
                    domain=domain,
                    sold_price=price,
                    sold_date=date[:10],
                    source=venue,
                ))
    except OSError as e:
        raise PersistenceError(
            code="dataset_unreadable",
            message=f"Failed to read sales dataset: {e}",
            details={"path": str(path)},
        )
    return sales
