import json
from datetime import date

import pytest

from ledger.application.report_service import run_reporting_pipeline
from ledger.config import DEFAULT_CURRENCY, PipelineConfig, load_config
from ledger.domain.models import EntryType, Season, SeasonFilter, SourceFilter
from ledger.ingestion import read_snapshot, snapshot_from_payload

SNAPSHOT = {
    "products": [
        {
            "id": "p1",
            "name": "Linen Dress",
            "sellingPricePerUnit": 100,
            "costPerUnit": 40,
            "season": "SUMMER",
            "productDeliveryRate": 90,
            "campaigns": [{"id": "c1", "name": "Spring Launch"}],
        }
    ],
    "dailyEntries": [
        {
            "id": "e1",
            "date": "2025-03-10",
            "time": "10:00",
            "entryType": "SUB",
            "productId": "p1",
            "source": "WEBSITE",
            "totalUnitsSold": 6,
            "totalOrders": 5,
            "campaigns": [{"id": "c1", "name": "Spring Launch", "adSpend": 120, "orders": 5}],
        },
        {
            "id": "e2",
            "date": "2025-03-10",
            "time": "18:30",
            "entryType": "SUB",
            "productId": "p1",
            "source": "WEBSITE",
            "totalUnitsSold": 10,
            "totalOrders": 8,
            "campaigns": [{"id": "c1", "name": "Spring Launch", "adSpend": 80, "orders": 3}],
        },
        {
            "id": "e3",
            "date": "2025-03-11",
            "entryType": "FINAL",
            "productId": "ghost",
            "totalUnitsSold": 1,
            "totalOrders": 1,
        },
    ],
    "settings": {"globalDeliveryRate": 80, "exchangeRate": 5},
}


def test_load_config_defaults_to_month_to_date():
    config = load_config(environ={}, today=date(2025, 3, 18))

    assert config.report_start == date(2025, 3, 1)
    assert config.report_end == date(2025, 3, 18)
    assert config.product_ids == ()
    assert config.source == SourceFilter.ALL
    assert config.season == SeasonFilter.ALL
    assert config.currency == DEFAULT_CURRENCY


def test_load_config_reads_environment(tmp_path):
    config = load_config(
        environ={
            "LEDGER_INPUT_PATH": str(tmp_path / "in.json"),
            "LEDGER_OUTPUT_DIR": str(tmp_path / "out"),
            "LEDGER_REPORT_START": "2025-01-01",
            "LEDGER_REPORT_END": "2025-01-31",
            "LEDGER_PRODUCT_IDS": "p1, p2,,",
            "LEDGER_SOURCE": "page",
            "LEDGER_SEASON": "winter",
            "LEDGER_CURRENCY": "USD",
        },
        today=date(2025, 3, 18),
    )

    assert config.input_path == tmp_path / "in.json"
    assert config.product_ids == ("p1", "p2")
    assert config.source == SourceFilter.PAGE
    assert config.season == SeasonFilter.WINTER
    assert config.currency == "USD"


@pytest.mark.parametrize(
    "environ",
    [
        {"LEDGER_REPORT_START": "2025-13-01"},
        {"LEDGER_REPORT_START": "2025-03-10", "LEDGER_REPORT_END": "2025-03-01"},
        {"LEDGER_SOURCE": "RADIO"},
        {"LEDGER_SEASON": "SPRING"},
    ],
)
def test_load_config_rejects_invalid_values(environ):
    with pytest.raises(ValueError):
        load_config(environ=environ, today=date(2025, 3, 18))


def test_snapshot_payload_maps_record_store_fields():
    snapshot = snapshot_from_payload(SNAPSHOT)

    product = snapshot.products[0]
    assert product.season == Season.SUMMER
    assert product.product_delivery_rate == 90.0
    assert product.campaigns[0].name == "Spring Launch"
    assert snapshot.entries[2].entry_type == EntryType.FINAL
    assert snapshot.entries[0].campaigns[0].ad_spend == 120.0
    assert snapshot.settings.global_delivery_rate == 80.0
    assert snapshot.settings.monthly_target_orders == 350.0


def test_snapshot_payload_rejects_bad_shapes():
    with pytest.raises(ValueError):
        snapshot_from_payload({"products": {"id": "p1"}})
    with pytest.raises(ValueError):
        snapshot_from_payload({"dailyEntries": [{"id": "e1", "date": "not-a-date"}]})


def test_read_snapshot_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_snapshot(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        read_snapshot(broken)

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        read_snapshot(listing)


def test_pipeline_writes_summary_outputs(tmp_path, capsys):
    input_path = tmp_path / "snapshot.json"
    input_path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    output_dir = tmp_path / "out"
    config = PipelineConfig(
        input_path=input_path,
        output_dir=output_dir,
        report_start=date(2025, 3, 1),
        report_end=date(2025, 3, 31),
    )

    report = run_reporting_pipeline(config)

    # latest sub: 10 units, campaign spend 200 converted at 5
    assert report.metrics.total_units_sold_input == 10
    assert report.metrics.total_ad_spend == pytest.approx(40.0)
    assert report.metrics.total_sales == pytest.approx(900.0)

    summary = json.loads((output_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["currency"] == "LYD"
    assert summary["campaign_performance"][0]["name"] == "Spring Launch"
    assert summary["sales_chart"] == [{"date": "2025-03-10", "total_sales": pytest.approx(900.0)}]
    assert "Linen Dress" in (output_dir / "summary.html").read_text(encoding="utf-8")
    assert (output_dir / "summary.xlsx").exists()

    out = capsys.readouterr().out
    assert "1 entries reference unknown products" in out
    assert "Saved JSON:" in out
