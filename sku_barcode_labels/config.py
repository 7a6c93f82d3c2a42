"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses
import json
import pathlib


SKU_LENGTH = 11
SKU_PREFIX_LENGTH = 9
SKU_SUFFIX_LENGTH = 2
SKU_MODULUS = 99999999999
MAX_VARIANT_SEQUENCE = 99

SHEET_WIDTH_MM = 210.0
SHEET_HEIGHT_MM = 297.0

STRATEGY_FIXED = "fixed"
STRATEGY_GRID = "grid"

FIELD_NAME = "name"
FIELD_PRICE = "price"
FIELD_BARCODE = "barcode"
FIELD_SKU = "sku"
ALLOWED_FIELDS = (FIELD_NAME, FIELD_PRICE, FIELD_BARCODE, FIELD_SKU)

# vertical anchors measured from the cell top edge
FIELD_MARGIN_TOP = 2.0
FIELD_LINE_STEP = 4.0
TEXT_CELL_HEIGHT = 4.0
BARCODE_HEIGHT = 12.0
BARCODE_WIDTH_RATIO = 0.8
BARCODE_SKU_GAP = 1.0

NAME_MAX_WORDS = 5
NAME_ELLIPSIS = "…"
MISSING_SKU_TEXT = "NOSKU"
CURRENCY_SYMBOL = "$"

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
NAME_FONT_SIZE = 8.0
PRICE_FONT_SIZE = 8.0
SKU_FONT_SIZE = 7.0
DEFAULT_TEXT_MIN_SIZE = 5.0
TEXT_BASELINE_FACTOR = 0.35
OUTLINE_LINE_WIDTH = 0.3

BARCODE_BAR_WIDTH = 2.0
BARCODE_BAR_HEIGHT = 60.0
BARCODE_QUIET_ZONE = 10.0

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

DEFAULT_LABEL = "40x30"
DEFAULT_PRINT_PER_STOCK = True
DEFAULT_MAX_LABELS_PER_BATCH = 500


@dataclasses.dataclass(frozen=True)
class LabelSize:
	token: str
	width: float
	height: float
	strategy: str
	labels_per_page: int | None = None


LABEL_SIZES = {
	"40x30": LabelSize("40x30", 40.0, 30.0, STRATEGY_FIXED, labels_per_page=4),
	"52x25": LabelSize("52x25", 52.0, 25.0, STRATEGY_GRID),
	"100x50": LabelSize("100x50", 100.0, 50.0, STRATEGY_GRID),
}


@dataclasses.dataclass
class Settings:
	default_label: str = DEFAULT_LABEL
	default_fields: list[str] = dataclasses.field(default_factory=lambda: list(ALLOWED_FIELDS))
	print_per_stock: bool = DEFAULT_PRINT_PER_STOCK
	max_labels_per_batch: int = DEFAULT_MAX_LABELS_PER_BATCH


@dataclasses.dataclass
class RenderResult:
	total_labels: int
	pages: int
	page_width: float
	page_height: float
	barcodes_created: int
	barcodes_reused: int


@dataclasses.dataclass
class LabelRequest:
	item_ids: list[int]
	variation_ids: list[int]
	fields: list[str]
	label_size: str
	print_per_stock: bool
	max_labels: int


#============================================
def sanitize_settings(values: dict) -> Settings:
	"""
	Build settings from raw values, keeping only supported options.

	Unknown label sizes and empty field lists fall back to the defaults.
	A batch limit that is not a positive integer falls back to the default.

	Args:
		values: Raw settings mapping.

	Returns:
		Settings instance.
	"""
	defaults = Settings()

	default_label = str(values.get("default_label", defaults.default_label))
	if default_label not in LABEL_SIZES:
		default_label = defaults.default_label

	raw_fields = values.get("default_fields", defaults.default_fields)
	if isinstance(raw_fields, str):
		raw_fields = [raw_fields]
	if not isinstance(raw_fields, (list, tuple)):
		raw_fields = []
	default_fields = [field for field in ALLOWED_FIELDS if field in raw_fields]
	if not default_fields:
		default_fields = list(defaults.default_fields)

	print_per_stock = bool(values.get("print_per_stock", defaults.print_per_stock))

	raw_max = values.get("max_labels_per_batch", defaults.max_labels_per_batch)
	try:
		max_labels = abs(int(raw_max))
	except (TypeError, ValueError):
		max_labels = defaults.max_labels_per_batch
	if max_labels < 1:
		max_labels = defaults.max_labels_per_batch

	return Settings(
		default_label=default_label,
		default_fields=default_fields,
		print_per_stock=print_per_stock,
		max_labels_per_batch=max_labels,
	)


#============================================
def load_settings(path: pathlib.Path | None) -> Settings:
	"""
	Load settings from a JSON file.

	Args:
		path: Settings JSON path, or None for defaults.

	Returns:
		Sanitized settings.
	"""
	if path is None or not path.exists():
		return Settings()
	text = path.read_text(encoding="utf-8")
	values = json.loads(text) if text.strip() else {}
	if not isinstance(values, dict):
		return Settings()
	return sanitize_settings(values)


#============================================
def save_settings(path: pathlib.Path, settings: Settings) -> None:
	"""
	Write sanitized settings to a JSON file.

	Args:
		path: Settings JSON path.
		settings: Settings to write.
	"""
	sanitized = sanitize_settings(dataclasses.asdict(settings))
	text = json.dumps(dataclasses.asdict(sanitized), indent=2, sort_keys=True)
	path.write_text(text, encoding="utf-8")
