"""
Rendering of laid-out labels into a PDF.
"""

# Standard Library
import io
import json
import pathlib

# PIP3 modules
import pypdf
import reportlab.lib.units
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.barcode
import sku_barcode_labels.config
import sku_barcode_labels.layout


LabelSize = sbl.config.LabelSize
LabelRequest = sbl.config.LabelRequest
RenderResult = sbl.config.RenderResult
PlacementRecord = sbl.layout.PlacementRecord
FieldPlacement = sbl.layout.FieldPlacement
BarcodeCache = sbl.barcode.BarcodeCache

MM = reportlab.lib.units.mm
FIELD_NAME = sbl.config.FIELD_NAME
FIELD_PRICE = sbl.config.FIELD_PRICE
FIELD_BARCODE = sbl.config.FIELD_BARCODE
FIELD_SKU = sbl.config.FIELD_SKU
NAME_MAX_WORDS = sbl.config.NAME_MAX_WORDS
NAME_ELLIPSIS = sbl.config.NAME_ELLIPSIS
MISSING_SKU_TEXT = sbl.config.MISSING_SKU_TEXT
CURRENCY_SYMBOL = sbl.config.CURRENCY_SYMBOL
DEFAULT_FONT_REGULAR = sbl.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = sbl.config.DEFAULT_FONT_BOLD
NAME_FONT_SIZE = sbl.config.NAME_FONT_SIZE
PRICE_FONT_SIZE = sbl.config.PRICE_FONT_SIZE
SKU_FONT_SIZE = sbl.config.SKU_FONT_SIZE
DEFAULT_TEXT_MIN_SIZE = sbl.config.DEFAULT_TEXT_MIN_SIZE
TEXT_BASELINE_FACTOR = sbl.config.TEXT_BASELINE_FACTOR
OUTLINE_LINE_WIDTH = sbl.config.OUTLINE_LINE_WIDTH
PROGRESS_BAR_WIDTH = sbl.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = sbl.config.PROGRESS_UPDATE_EVERY

TEXT_STYLES = {
	FIELD_NAME: (DEFAULT_FONT_BOLD, NAME_FONT_SIZE),
	FIELD_PRICE: (DEFAULT_FONT_REGULAR, PRICE_FONT_SIZE),
	FIELD_SKU: (DEFAULT_FONT_REGULAR, SKU_FONT_SIZE),
}


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def trim_words(text: str, max_words: int = NAME_MAX_WORDS, more: str = NAME_ELLIPSIS) -> str:
	"""
	Trim text to a word count, appending a marker when cut.

	Args:
		text: Input text.
		max_words: Maximum words kept.
		more: Marker appended after trimmed text.

	Returns:
		Trimmed text.
	"""
	words = text.split()
	if len(words) <= max_words:
		return " ".join(words)
	return " ".join(words[:max_words]) + more


#============================================
def format_price(price: float | None) -> str:
	"""
	Format a price for printing.

	Args:
		price: Price value or None.

	Returns:
		Price string, empty when there is no price.
	"""
	if price is None:
		return ""
	return f"{CURRENCY_SYMBOL}{price:,.2f}"


#============================================
def field_text(placement: PlacementRecord, field: str) -> str:
	"""
	Text printed for a text field of a label.

	Args:
		placement: Placement record.
		field: Field name.

	Returns:
		Text value.
	"""
	item = placement.item
	if field == FIELD_NAME:
		return trim_words(item.name)
	if field == FIELD_PRICE:
		return format_price(item.price)
	if field == FIELD_SKU:
		return item.sku or MISSING_SKU_TEXT
	raise ValueError(f"Field {field!r} has no text")


#============================================
def fit_font_size(text: str, font_name: str, font_size: float, max_width: float) -> float:
	"""
	Shrink a font size until the text fits the width, down to a floor.

	Args:
		text: Text to fit.
		font_name: Font name.
		font_size: Preferred size.
		max_width: Available width in points.

	Returns:
		Font size to use.
	"""
	width = reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)
	if width <= max_width or width <= 0:
		return font_size
	scaled = font_size * max_width / width
	return max(DEFAULT_TEXT_MIN_SIZE, scaled)


#============================================
def draw_text_field(
	pdf: reportlab.pdfgen.canvas.Canvas,
	field: FieldPlacement,
	text: str,
	page_height: float,
) -> None:
	"""
	Draw centered text inside a field cell.

	Args:
		pdf: ReportLab canvas.
		field: Field placement in millimetres.
		text: Text to draw.
		page_height: Page height in points.
	"""
	if not text:
		return
	font_name, font_size = TEXT_STYLES[field.field]
	font_size = fit_font_size(text, font_name, font_size, field.width * MM)
	pdf.setFont(font_name, font_size)
	center_x = (field.x + field.width / 2.0) * MM
	center_y = page_height - (field.y + field.height / 2.0) * MM
	pdf.drawCentredString(center_x, center_y - font_size * TEXT_BASELINE_FACTOR, text)


#============================================
def draw_label_outline(
	pdf: reportlab.pdfgen.canvas.Canvas,
	placement: PlacementRecord,
	page_height: float,
) -> None:
	"""
	Draw the outline of a label cell.

	Args:
		pdf: ReportLab canvas.
		placement: Placement record.
		page_height: Page height in points.
	"""
	pdf.setLineWidth(OUTLINE_LINE_WIDTH)
	pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
	x = placement.x * MM
	y = page_height - (placement.y + placement.height) * MM
	pdf.rect(x, y, placement.width * MM, placement.height * MM, stroke=1, fill=0)


#============================================
def group_by_page(placements: list[PlacementRecord]) -> list[list[PlacementRecord]]:
	"""
	Group placements by page index.

	Args:
		placements: Placement records in layout order.

	Returns:
		One list of placements per page.
	"""
	pages: list[list[PlacementRecord]] = []
	for placement in placements:
		while len(pages) <= placement.page_index:
			pages.append([])
		pages[placement.page_index].append(placement)
	return pages


#============================================
def build_text_pages(
	pages: list[list[PlacementRecord]],
	fields: list[str],
	page_width: float,
	page_height: float,
	draw_outlines: bool,
) -> pypdf.PdfReader:
	"""
	Draw every text field onto in-memory PDF pages.

	Args:
		pages: Placements grouped by page.
		fields: Requested fields.
		page_width: Page width in points.
		page_height: Page height in points.
		draw_outlines: Draw label cell outlines.

	Returns:
		Reader over the rendered pages.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	text_fields = [field for field in fields if field != FIELD_BARCODE]
	for page in pages:
		for placement in page:
			if draw_outlines:
				draw_label_outline(pdf, placement, page_height)
			for field in placement.fields:
				if field.field not in text_fields:
					continue
				draw_text_field(pdf, field, field_text(placement, field.field), page_height)
		pdf.showPage()
	pdf.save()
	buffer.seek(0)
	return pypdf.PdfReader(buffer)


#============================================
def merge_barcode(
	page: pypdf.PageObject,
	tile_page: pypdf.PageObject,
	field: FieldPlacement,
	page_height: float,
) -> None:
	"""
	Stretch a barcode tile into its field box on a page.

	Args:
		page: Target page.
		tile_page: Barcode tile page.
		field: Barcode field placement in millimetres.
		page_height: Page height in points.
	"""
	tile_width = float(tile_page.mediabox.width)
	tile_height = float(tile_page.mediabox.height)
	x_scale = field.width * MM / tile_width
	y_scale = field.height * MM / tile_height
	x = field.x * MM
	y = page_height - (field.y + field.height) * MM
	transform = pypdf.Transformation().scale(x_scale, y_scale).translate(x, y)
	page.merge_transformed_page(tile_page, transform)


#============================================
def render_labels(
	placements: list[PlacementRecord],
	label_size: LabelSize,
	fields: list[str],
	barcode_cache: BarcodeCache,
	output_path: pathlib.Path,
	draw_outlines: bool = False,
) -> RenderResult:
	"""
	Render placements into a label PDF.

	Args:
		placements: Placement records from the layout engine.
		label_size: Label size the placements were computed for.
		fields: Requested fields.
		barcode_cache: Cache of barcode tiles.
		output_path: Output PDF path.
		draw_outlines: Draw label cell outlines.

	Returns:
		RenderResult.
	"""
	width_mm, height_mm = sbl.layout.page_size(label_size)
	page_width = width_mm * MM
	page_height = height_mm * MM
	created_before = barcode_cache.created
	reused_before = barcode_cache.reused

	pages = group_by_page(placements)
	if not pages:
		print("No labels to render.")
		return RenderResult(
			total_labels=0,
			pages=0,
			page_width=width_mm,
			page_height=height_mm,
			barcodes_created=0,
			barcodes_reused=0,
		)

	text_reader = build_text_pages(pages, fields, page_width, page_height, draw_outlines)
	writer = pypdf.PdfWriter()
	tile_cache: dict[str, pypdf.PageObject] = {}
	total = len(placements)
	done = 0
	print_progress("Labels", 0, total)
	for page_index, page_placements in enumerate(pages):
		writer.add_page(text_reader.pages[page_index])
		page = writer.pages[-1]
		for placement in page_placements:
			done += 1
			for field in placement.fields:
				if field.field != FIELD_BARCODE or not placement.item.sku:
					continue
				tile_path = str(barcode_cache.get_or_create_barcode_image(placement.item.sku))
				if tile_path not in tile_cache:
					tile_cache[tile_path] = pypdf.PdfReader(tile_path).pages[0]
				merge_barcode(page, tile_cache[tile_path], field, page_height)
			if done % PROGRESS_UPDATE_EVERY == 0 or done == total:
				print_progress("Labels", done, total)
	print()

	output_path.parent.mkdir(parents=True, exist_ok=True)
	with output_path.open("wb") as handle:
		writer.write(handle)

	return RenderResult(
		total_labels=total,
		pages=len(pages),
		page_width=width_mm,
		page_height=height_mm,
		barcodes_created=barcode_cache.created - created_before,
		barcodes_reused=barcode_cache.reused - reused_before,
	)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	request: LabelRequest,
	placements: list[PlacementRecord],
	result: RenderResult,
	label_size: LabelSize,
) -> None:
	"""
	Write a manifest JSON file describing a print run.

	Args:
		manifest_path: Output path.
		request: Label request.
		placements: Placement records.
		result: Render result.
		label_size: Label size used.
	"""
	labels_by_item: dict[str, int] = {}
	skus: dict[str, str] = {}
	for placement in placements:
		key = str(placement.item.item_id)
		labels_by_item[key] = labels_by_item.get(key, 0) + 1
		skus[key] = placement.item.sku
	data = {
		"request": {
			"items": request.item_ids,
			"variations": request.variation_ids,
			"fields": request.fields,
			"label_size": request.label_size,
			"print_per_stock": request.print_per_stock,
			"max_labels": request.max_labels,
		},
		"labels_by_item": labels_by_item,
		"skus": skus,
		"total_labels": result.total_labels,
		"pages": result.pages,
		"barcodes_created": result.barcodes_created,
		"barcodes_reused": result.barcodes_reused,
		"layout": {
			"label_width": label_size.width,
			"label_height": label_size.height,
			"strategy": label_size.strategy,
			"labels_per_page": label_size.labels_per_page,
			"page_width": result.page_width,
			"page_height": result.page_height,
		},
		"fonts": {
			"regular": DEFAULT_FONT_REGULAR,
			"bold": DEFAULT_FONT_BOLD,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
