"""HTML report generator for the generated sales report summary."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ledger.application.reporting.metrics import fmt_count, fmt_money, fmt_pct, fmt_ratio, to_float

KPI_LABELS: List[tuple[str, str]] = [
    ("total_sales", "Total Sales"),
    ("gross_profit", "Gross Profit"),
    ("total_orders", "Orders"),
    ("total_units_sold", "Units Sold"),
    ("total_ad_spend", "Ad Spend"),
    ("cpo", "CPO"),
    ("cps", "CPS"),
    ("roas", "ROAS"),
    ("roi", "ROI"),
    ("aov", "AOV"),
    ("upt", "UPT"),
]
MONEY_KEYS = {"total_sales", "gross_profit", "total_ad_spend", "cpo", "cps", "aov"}


def _fmt_kpi(key: str, value: Any, currency: str) -> str:
    number = to_float(value)
    if key in MONEY_KEYS:
        return fmt_money(number, currency, digits=2 if key in {"cpo", "cps", "aov"} else 0)
    if key == "roi":
        return fmt_pct(number)
    if key in {"roas", "upt"}:
        return fmt_ratio(number)
    return fmt_count(number)


def _profit_css_class(value: Any) -> str:
    number = to_float(value)
    if abs(number) < 1e-12:
        return "neutral"
    return "pos" if number > 0 else "neg"


def _render_table(headers: Sequence[str], rows: Sequence[Sequence[str]], css: Sequence[str] | None = None) -> str:
    head = "".join(f"<th>{escape(header)}</th>" for header in headers)
    body: List[str] = []
    for idx, row in enumerate(rows):
        row_class = f" class=\"{css[idx]}\"" if css else ""
        cells = "".join(f"<td>{escape(cell)}</td>" for cell in row)
        body.append(f"<tr{row_class}>{cells}</tr>")
    if not body:
        body.append(f"<tr><td colspan=\"{len(headers)}\" class=\"muted\">No data</td></tr>")
    return f"<table><thead><tr>{head}</tr></thead><tbody>{''.join(body)}</tbody></table>"


def _kpi_section(summary: Dict[str, Any], currency: str) -> str:
    kpis = summary.get("kpi_summary")
    if not isinstance(kpis, dict):
        return ""
    rows = [[label, _fmt_kpi(key, kpis.get(key), currency)] for key, label in KPI_LABELS]
    breakeven = summary.get("breakeven", {})
    share = summary.get("spend_vs_revenue_share", {})
    champions = ", ".join(f"{row['product_name']} ({row['delta']:+.1f}pp)" for row in share.get("champions", []))
    offenders = ", ".join(f"{row['product_name']} ({row['delta']:+.1f}pp)" for row in share.get("offenders", []))
    return (
        "<section class=\"panel\"><h2>KPI Summary</h2>"
        f"{_render_table(['Metric', 'Value'], rows)}"
        f"<p class=\"note\">{escape(str(breakeven.get('comment', '')))}</p>"
        f"<p class=\"note\">Champions: {escape(champions or '-')}</p>"
        f"<p class=\"note\">Offenders: {escape(offenders or '-')}</p>"
        "</section>"
    )


def _product_section(summary: Dict[str, Any], currency: str) -> str:
    products = summary.get("product_profitability")
    if not isinstance(products, list):
        return ""
    rows = [
        [
            str(row.get("product_name", "")),
            fmt_count(to_float(row.get("units_sold"))),
            fmt_money(to_float(row.get("total_revenue")), currency),
            fmt_money(to_float(row.get("total_cost")), currency),
            fmt_money(to_float(row.get("total_ad_spend")), currency),
            fmt_money(to_float(row.get("net_profit")), currency),
            fmt_pct(to_float(row.get("profit_margin"))),
        ]
        for row in products
    ]
    css = [_profit_css_class(row.get("net_profit")) for row in products]
    headers = ["Product", "Units", "Revenue", "Cost", "Ad Spend", "Net Profit", "Margin"]
    return f"<section class=\"panel\"><h2>Product Profitability</h2>{_render_table(headers, rows, css)}</section>"


def _campaign_section(summary: Dict[str, Any], currency: str) -> str:
    campaigns = summary.get("campaign_performance")
    if not isinstance(campaigns, list):
        return ""
    rows = [
        [
            str(row.get("name", "")),
            fmt_money(to_float(row.get("total_sales")), currency),
            fmt_money(to_float(row.get("total_ad_spend")), currency),
            fmt_count(round(to_float(row.get("total_orders")), 2)),
            fmt_money(to_float(row.get("net_profit")), currency),
            fmt_money(to_float(row.get("cpo")), currency, digits=2),
            fmt_ratio(to_float(row.get("roas"))),
            fmt_pct(to_float(row.get("roi"))),
        ]
        for row in campaigns
    ]
    css = [_profit_css_class(row.get("net_profit")) for row in campaigns]
    headers = ["Campaign", "Sales", "Ad Spend", "Orders", "Net Profit", "CPO", "ROAS", "ROI"]
    return f"<section class=\"panel\"><h2>Campaign Performance</h2>{_render_table(headers, rows, css)}</section>"


def _sales_section(summary: Dict[str, Any], currency: str) -> str:
    points = summary.get("sales_chart")
    if not isinstance(points, list):
        return ""
    rows = [[str(point.get("date", "")), fmt_money(to_float(point.get("total_sales")), currency)] for point in points]
    return f"<section class=\"panel\"><h2>Sales by Date</h2>{_render_table(['Date', 'Sales'], rows)}</section>"


def _distribution_section(summary: Dict[str, Any]) -> str:
    buckets = summary.get("order_distribution")
    if not isinstance(buckets, list):
        return ""
    rows = [[str(item.get("label", "")), fmt_pct(to_float(item.get("value")))] for item in buckets]
    return f"<section class=\"panel\"><h2>Order Size Distribution</h2>{_render_table(['Order size', 'Share'], rows)}</section>"


def write_html_report(output_path: Path, summary: Dict[str, Any]) -> None:
    currency = str(summary.get("currency", ""))
    config = summary.get("config", {})
    generated_at = datetime.now().strftime("%Y-%m-%d %H:%M")
    sections_html = "".join(
        [
            _kpi_section(summary, currency),
            _sales_section(summary, currency),
            _product_section(summary, currency),
            _campaign_section(summary, currency),
            _distribution_section(summary),
        ]
    )

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Sales Report</title>
  <style>
    :root {{
      --bg: #f3f6fb;
      --panel: #ffffff;
      --line: #d5dce8;
      --text: #0f172a;
      --sub: #475569;
      --brand: #c2410c;
    }}
    * {{ box-sizing: border-box; }}
    body {{
      margin: 0;
      background: var(--bg);
      color: var(--text);
      font-family: "Segoe UI", sans-serif;
    }}
    .wrap {{ max-width: 1400px; margin: 0 auto; padding: 20px; }}
    .panel {{
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 14px;
      padding: 14px 18px;
      margin-bottom: 14px;
    }}
    h1 {{ margin: 0 0 8px; color: var(--brand); font-size: 28px; }}
    .meta, .muted {{ color: var(--sub); font-size: 13px; }}
    table {{ width: 100%; border-collapse: collapse; font-size: 12px; }}
    th, td {{ border: 1px solid var(--line); padding: 6px 8px; text-align: left; }}
    th {{ background: #fff7ed; font-weight: 700; }}
    tr.pos td {{ color: #15803d; }}
    tr.neg td {{ color: #b91c1c; }}
    .note {{ margin: 8px 0 0; line-height: 1.5; }}
  </style>
</head>
<body>
  <div class="wrap">
    <section class="panel">
      <h1>Sales Report</h1>
      <div class="meta">Period: {escape(str(config.get('start', '')))} .. {escape(str(config.get('end', '')))} | Source: {escape(str(config.get('source', '')))} | Season: {escape(str(config.get('season', '')))} | Generated: {escape(generated_at)}</div>
      <p class="note">{escape(str(summary.get('overall_comment', '')))}</p>
    </section>
    {sections_html}
  </div>
</body>
</html>
"""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
