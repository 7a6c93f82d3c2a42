"""
Label sheet layout: quantity expansion, grid placement and page breaks.

All coordinates are millimetres measured from the top-left corner of the
page. The renderer converts them to PDF points.
"""

# Standard Library
import dataclasses
import math
import typing

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.catalog
import sku_barcode_labels.config
import sku_barcode_labels.errors


Item = sbl.catalog.Item
LabelSize = sbl.config.LabelSize
BatchLimitExceeded = sbl.errors.BatchLimitExceeded

LABEL_SIZES = sbl.config.LABEL_SIZES
DEFAULT_LABEL = sbl.config.DEFAULT_LABEL
ALLOWED_FIELDS = sbl.config.ALLOWED_FIELDS
STRATEGY_FIXED = sbl.config.STRATEGY_FIXED
STRATEGY_GRID = sbl.config.STRATEGY_GRID
SHEET_WIDTH_MM = sbl.config.SHEET_WIDTH_MM
SHEET_HEIGHT_MM = sbl.config.SHEET_HEIGHT_MM
FIELD_NAME = sbl.config.FIELD_NAME
FIELD_PRICE = sbl.config.FIELD_PRICE
FIELD_BARCODE = sbl.config.FIELD_BARCODE
FIELD_SKU = sbl.config.FIELD_SKU
FIELD_MARGIN_TOP = sbl.config.FIELD_MARGIN_TOP
FIELD_LINE_STEP = sbl.config.FIELD_LINE_STEP
TEXT_CELL_HEIGHT = sbl.config.TEXT_CELL_HEIGHT
BARCODE_HEIGHT = sbl.config.BARCODE_HEIGHT
BARCODE_WIDTH_RATIO = sbl.config.BARCODE_WIDTH_RATIO
BARCODE_SKU_GAP = sbl.config.BARCODE_SKU_GAP


@dataclasses.dataclass
class FieldPlacement:
	field: str
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass
class PlacementRecord:
	item: Item
	label_index: int
	page_index: int
	x: float
	y: float
	width: float
	height: float
	fields: list[FieldPlacement]


#============================================
def resolve_label_size(token: str | None) -> LabelSize:
	"""
	Map a label size token to a supported size, defaulting unknown tokens.

	Args:
		token: Size token like "52x25".

	Returns:
		LabelSize from the supported set.
	"""
	if token and token in LABEL_SIZES:
		return LABEL_SIZES[token]
	return LABEL_SIZES[DEFAULT_LABEL]


#============================================
def normalize_fields(
	fields: typing.Iterable[str] | None,
	default_fields: typing.Iterable[str] = ALLOWED_FIELDS,
) -> list[str]:
	"""
	Keep supported fields in canonical print order.

	Args:
		fields: Requested field names.
		default_fields: Fallback when nothing valid was requested.

	Returns:
		Ordered list of field names.
	"""
	requested = set(fields or [])
	ordered = [field for field in ALLOWED_FIELDS if field in requested]
	if not ordered:
		fallback = set(default_fields)
		ordered = [field for field in ALLOWED_FIELDS if field in fallback]
	return ordered


#============================================
def label_quantity(item: Item, print_per_stock: bool) -> int:
	"""
	Number of labels to print for one item.

	Args:
		item: Catalog item.
		print_per_stock: Print one label per unit in stock.

	Returns:
		Label count, at least 1.
	"""
	if not print_per_stock:
		return 1
	return max(1, int(item.stock_quantity or 0))


#============================================
def grid_columns(label_size: LabelSize) -> int:
	"""
	Columns of a grid layout on the standard sheet.

	Args:
		label_size: Label size.

	Returns:
		Column count, at least 1.
	"""
	return max(1, int(math.floor(SHEET_WIDTH_MM / label_size.width)))


#============================================
def page_size(label_size: LabelSize) -> tuple[float, float]:
	"""
	Page dimensions used for a label size.

	Args:
		label_size: Label size.

	Returns:
		Tuple of (width, height) in millimetres.
	"""
	if label_size.strategy == STRATEGY_FIXED:
		return (label_size.width, label_size.height * label_size.labels_per_page)
	return (SHEET_WIDTH_MM, SHEET_HEIGHT_MM)


#============================================
def expand_items(
	items_with_quantities: typing.Iterable[tuple[Item, int]],
	max_labels: int,
) -> list[Item]:
	"""
	Expand items into one entry per label, enforcing the batch limit.

	Args:
		items_with_quantities: Ordered (item, quantity) pairs.
		max_labels: Maximum labels allowed in the batch.

	Returns:
		Expanded list of items, one per label.
	"""
	if max_labels < 1:
		raise ValueError(f"max_labels must be at least 1, got {max_labels}")
	expanded: list[Item] = []
	for item, quantity in items_with_quantities:
		quantity = max(1, int(quantity))
		if len(expanded) + quantity > max_labels:
			raise BatchLimitExceeded(len(expanded) + quantity, max_labels)
		expanded.extend([item] * quantity)
	return expanded


#============================================
def fixed_slots(count: int, label_size: LabelSize) -> typing.Iterator[tuple[int, float, float]]:
	"""
	Single-column slots with a fixed label count per page.

	Args:
		count: Number of labels.
		label_size: Label size with labels_per_page set.

	Yields:
		Tuples of (page_index, x, y).
	"""
	labels_per_page = label_size.labels_per_page
	for index in range(count):
		page_index = index // labels_per_page
		position = index % labels_per_page
		yield (page_index, 0.0, position * label_size.height)


#============================================
def grid_slots(count: int, label_size: LabelSize) -> typing.Iterator[tuple[int, float, float]]:
	"""
	Left-to-right, top-to-bottom slots on the standard sheet.

	A new page starts when a row past the first would end below the sheet.

	Args:
		count: Number of labels.
		label_size: Label size.

	Yields:
		Tuples of (page_index, x, y).
	"""
	columns = grid_columns(label_size)
	page_index = 0
	slot = 0
	for _index in range(count):
		row = slot // columns
		if row > 0 and row * label_size.height + label_size.height > SHEET_HEIGHT_MM:
			page_index += 1
			slot = 0
			row = 0
		col = slot % columns
		yield (page_index, col * label_size.width, row * label_size.height)
		slot += 1


#============================================
def field_placements(
	x: float,
	y: float,
	width: float,
	fields: typing.Iterable[str],
) -> list[FieldPlacement]:
	"""
	Anchor each requested field inside a label cell.

	Anchors are fixed offsets from the cell top, so skipping a field
	leaves the others where they are.

	Args:
		x: Cell left edge.
		y: Cell top edge.
		width: Cell width.
		fields: Requested fields.

	Returns:
		FieldPlacement list in canonical field order.
	"""
	name_y = y + FIELD_MARGIN_TOP
	price_y = name_y + FIELD_LINE_STEP
	barcode_y = price_y + FIELD_LINE_STEP
	sku_y = barcode_y + BARCODE_HEIGHT + BARCODE_SKU_GAP
	barcode_width = width * BARCODE_WIDTH_RATIO
	anchors = {
		FIELD_NAME: FieldPlacement(FIELD_NAME, x, name_y, width, TEXT_CELL_HEIGHT),
		FIELD_PRICE: FieldPlacement(FIELD_PRICE, x, price_y, width, TEXT_CELL_HEIGHT),
		FIELD_BARCODE: FieldPlacement(
			FIELD_BARCODE,
			x + (width - barcode_width) / 2.0,
			barcode_y,
			barcode_width,
			BARCODE_HEIGHT,
		),
		FIELD_SKU: FieldPlacement(FIELD_SKU, x, sku_y, width, TEXT_CELL_HEIGHT),
	}
	requested = set(fields)
	return [anchors[field] for field in ALLOWED_FIELDS if field in requested]


#============================================
def layout(
	items_with_quantities: typing.Iterable[tuple[Item, int]],
	label_size: LabelSize,
	max_labels: int,
	fields: typing.Iterable[str] = ALLOWED_FIELDS,
) -> list[PlacementRecord]:
	"""
	Place every label of a batch on pages.

	The batch is all-or-nothing: when the running label count would pass
	max_labels, BatchLimitExceeded is raised and no placements are returned.

	Args:
		items_with_quantities: Ordered (item, quantity) pairs.
		label_size: Label size to lay out.
		max_labels: Maximum labels allowed in the batch.
		fields: Fields to anchor on each label.

	Returns:
		Ordered list of PlacementRecord.
	"""
	expanded = expand_items(items_with_quantities, max_labels)
	fields = list(fields)
	if label_size.strategy == STRATEGY_FIXED:
		slots = fixed_slots(len(expanded), label_size)
	elif label_size.strategy == STRATEGY_GRID:
		slots = grid_slots(len(expanded), label_size)
	else:
		raise ValueError(f"Unknown layout strategy {label_size.strategy!r}")

	placements: list[PlacementRecord] = []
	for index, (item, slot) in enumerate(zip(expanded, slots)):
		page_index, x, y = slot
		placements.append(
			PlacementRecord(
				item=item,
				label_index=index,
				page_index=page_index,
				x=x,
				y=y,
				width=label_size.width,
				height=label_size.height,
				fields=field_placements(x, y, label_size.width, fields),
			)
		)
	return placements


#============================================
def count_pages(placements: list[PlacementRecord]) -> int:
	"""
	Count pages used by a placement list.

	Args:
		placements: Placement records.

	Returns:
		Page count, 0 for an empty batch.
	"""
	if not placements:
		return 0
	return placements[-1].page_index + 1
