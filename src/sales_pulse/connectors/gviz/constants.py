"""gviz endpoint and column layout constants."""

from sales_pulse.models.layout import ColumnLayout

SHEET_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq?tqx=out:json&gid={gid}"

# Pipeline dashboard sheet, Dashboard_Calculations tab
DEFAULT_SPREADSHEET_ID = "1zL0ZkcCC4K-PoVwlz_mkNWCR22XfPdM1_7k-rkg32Es"
DEFAULT_GID = "2004389061"

# First layout: no attribution column, client load in column N
LAYOUT_V1 = ColumnLayout(
    name="v1",
    total_opportunities=0,
    qualified_conversations=1,
    converted_clients=2,
    conversion_rate=3,
    total_revenue=4,
    revenue_period=5,
    revenue_amount=6,
    activity_period=7,
    activity_count=8,
    source_name=9,
    source_qualified=10,
    source_converted=11,
    source_rate=12,
    source_revenue=None,
    active_client_load=13,
)

# Second layout: attributed revenue in column N pushes client load to column O
LAYOUT_V2 = ColumnLayout(
    name="v2",
    total_opportunities=0,
    qualified_conversations=1,
    converted_clients=2,
    conversion_rate=3,
    total_revenue=4,
    revenue_period=5,
    revenue_amount=6,
    activity_period=7,
    activity_count=8,
    source_name=9,
    source_qualified=10,
    source_converted=11,
    source_rate=12,
    source_revenue=13,
    active_client_load=14,
)

LAYOUTS: dict[str, ColumnLayout] = {
    "v1": LAYOUT_V1,
    "v2": LAYOUT_V2,
}

DEFAULT_LAYOUT = LAYOUT_V2
