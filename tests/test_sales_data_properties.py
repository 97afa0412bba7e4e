"""
Tests for the bundled sales sample and the TSV dataset loader.
"""

from pathlib import Path

import pytest

from domain_appraiser.exceptions import PersistenceError
from domain_appraiser.sales_data import SAMPLE_SALES, load_sales_tsv


class TestSampleSales:

    def test_sample_prices_are_positive(self) -> None:
        assert SAMPLE_SALES
        assert all(sale.sold_price > 0 for sale in SAMPLE_SALES)

    def test_sample_domains_are_unique(self) -> None:
        domains = [sale.domain for sale in SAMPLE_SALES]

        assert len(domains) == len(set(domains))


class TestLoadSalesTSV:

    def test_rows_are_parsed_and_filtered(self, tmp_path: Path) -> None:
        path = tmp_path / "sales.tsv"
        path.write_text(
            "domain\tprice\tdate\tvenue\n"
            "Zop.com\t5000\t2021-03-04T00:00:00\tSedo\n"
            "cheap.net\t12.9\t2020-01-01\t\n"
            "free.org\t0\t2020-01-01\tSedo\n"
            "noprice.com\tn/a\t2020-01-01\tSedo\n"
            "nodate.com\t800\t\tSedo\n"
            "localhost\t800\t2020-01-01\tSedo\n",
            encoding="utf-8",
        )

        sales = load_sales_tsv(path)

        assert [(s.domain, s.sold_price, s.sold_date, s.source) for s in sales] == [
            ("zop.com", 5000, "2021-03-04", "Sedo"),
            ("cheap.net", 12, "2020-01-01", "Unknown"),
        ]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PersistenceError) as excinfo:
            load_sales_tsv(tmp_path / "missing.tsv")

        assert excinfo.value.code == "dataset_unreadable"
