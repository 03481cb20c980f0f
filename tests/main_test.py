from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from domain.tax import FormRow
from main import main, run


@pytest.fixture
def report_inputs(tmp_path: Path) -> tuple[Path, Path, Path]:
    transactions = tmp_path / "transactions.csv"
    transactions.write_text(
        "date,isin,currency,amount\n"
        "2022-02-21,IE00B4L5Y983,EUR,1000.00\n"
        "2022-02-25,US0378331005,USD,100.00\n",
        encoding="utf-8",
    )
    securities = tmp_path / "securities.csv"
    securities.write_text(
        "isin,type,domicile,accumulating\nIE00B4L5Y983,ETF,IE,true\nUS0378331005,STOCK,US,\n",
        encoding="utf-8",
    )
    rates = tmp_path / "rates.csv"
    rates.write_text("date,currency,rate\n2022-02-25,USD,1.1216\n", encoding="utf-8")
    return transactions, securities, rates


def test_run_builds_tax_form(report_inputs: tuple[Path, Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    transactions, securities, rates = report_inputs

    form = run(transactions, securities_csv=securities, rates_csv=rates, remote_securities=False)

    assert form == {
        Decimal("0.0012"): FormRow(quantity=1, taxable_value=Decimal("100000"), tax_value=Decimal("120")),
        Decimal("0.0035"): FormRow(quantity=1, taxable_value=Decimal("11216"), tax_value=Decimal("39.256")),
    }
    output = capsys.readouterr().out
    assert f"Imported 2 transactions from {transactions}" in output
    assert "Total tax due: € 1,60" in output


def test_main_exits_with_error_for_unknown_security(
    report_inputs: tuple[Path, Path, Path], tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    transactions, _, rates = report_inputs
    securities = tmp_path / "partial.csv"
    securities.write_text("isin,type,domicile,accumulating\nIE00B4L5Y983,ETF,IE,true\n", encoding="utf-8")

    exit_code = main(
        ["--csv", str(transactions), "--securities-csv", str(securities), "--rates-csv", str(rates)]
    )

    assert exit_code == 1
    assert "Unknown security US0378331005" in caplog.text


def test_main_succeeds(report_inputs: tuple[Path, Path, Path]) -> None:
    transactions, securities, rates = report_inputs

    exit_code = main(
        ["--csv", str(transactions), "--securities-csv", str(securities), "--rates-csv", str(rates)]
    )

    assert exit_code == 0
