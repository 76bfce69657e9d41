"""Keyword tables driving intent classification and column discovery.

All tables are immutable tuples. Order matters wherever a table is scanned
for the first match, so entries are listed in precedence order.
"""

CHART_KEYWORDS = (
    "chart",
    "graph",
    "plot",
    "visualize",
    "visualization",
    "bar chart",
    "line chart",
    "pie chart",
)

# (chart type, trigger words); first entry with a trigger in the query wins
CHART_TYPES = (
    ("bar", ("bar", "column")),
    ("line", ("line",)),
    ("pie", ("pie",)),
    ("scatter", ("scatter",)),
)
DEFAULT_CHART_TYPE = "bar"

REGION_KEYWORDS = (
    "region",
    "area",
    "zone",
    "territory",
    "location",
    "state",
    "country",
    "city",
)

# Compound directions precede their parts so "northeast" is not read as "north"
REGION_VALUES = (
    "northeast",
    "northwest",
    "southeast",
    "southwest",
    "west",
    "east",
    "north",
    "south",
    "central",
)

REGION_COLUMN_KEYWORDS = ("region", "area", "zone", "territory", "location")

PRODUCT_KEYWORDS = ("product", "item", "category", "brand", "model", "type")

DATE_KEYWORDS = (
    "date",
    "month",
    "year",
    "quarter",
    "week",
    "day",
    "time",
    "period",
)

MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

YEARS = ("2020", "2021", "2022", "2023", "2024", "2025")

QUARTERS = ("q1", "q2", "q3", "q4")

DATE_COLUMN_KEYWORDS = ("date", "month", "year", "quarter", "time", "period")

SALES_KEYWORDS = (
    "sales",
    "revenue",
    "income",
    "profit",
    "earnings",
    "amount",
    "value",
    "price",
)

TOP_KEYWORDS = ("top", "highest", "best", "maximum")
BOTTOM_KEYWORDS = ("bottom", "lowest", "worst", "minimum")
RANKING_KEYWORDS = (
    "top",
    "bottom",
    "highest",
    "lowest",
    "best",
    "worst",
    "maximum",
    "minimum",
)

COMPARISON_KEYWORDS = ("compare", "vs", "versus", "against", "between", "difference")

AGGREGATION_KEYWORDS = (
    "sum",
    "total",
    "average",
    "mean",
    "count",
    "max",
    "min",
    "aggregate",
)

# (verb, output field prefix, trigger words); first entry with a trigger wins
AGGREGATION_VERBS = (
    ("sum", "sum", ("sum", "total")),
    ("average", "avg", ("average", "mean", "avg")),
    ("count", "count", ("count",)),
    ("max", "max", ("max", "maximum", "highest")),
    ("min", "min", ("min", "minimum", "lowest")),
)

FILTER_KEYWORDS = ("filter", "where", "show", "find", "get", "extract", "select")

FILTER_STOP_WORDS = frozenset(
    {"filter", "where", "show", "find", "get", "extract", "select", "data", "records"}
)

SHEET_KEYWORDS = ("sheet", "worksheet", "tab")

GENERAL_STOP_WORDS = frozenset(
    {
        "show",
        "me",
        "get",
        "find",
        "display",
        "list",
        "the",
        "all",
        "and",
        "or",
        "with",
        "without",
        "from",
        "to",
        "in",
        "on",
        "at",
        "by",
        "for",
        "of",
        "that",
        "have",
        "has",
    }
)

BOOLEAN_LITERALS = frozenset({"true", "false", "yes", "no"})

MIN_TOKEN_LENGTH = 3
