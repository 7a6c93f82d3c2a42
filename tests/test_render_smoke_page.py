import pathlib

import fitz
import PIL.Image
import pypdf

import sku_barcode_labels.barcode
import sku_barcode_labels.catalog
import sku_barcode_labels.config
import sku_barcode_labels.layout
import sku_barcode_labels.render


Item = sku_barcode_labels.catalog.Item
LABEL_SIZES = sku_barcode_labels.config.LABEL_SIZES
ALL_FIELDS = ["name", "price", "barcode", "sku"]

DPI = 300
INK_THRESHOLD = 128
MM_PER_INCH = 25.4


#============================================
def _render_pdf_page(path: pathlib.Path, page_number: int) -> PIL.Image.Image:
	"""
	Render one page of a PDF to an image.

	Args:
		path: PDF path.
		page_number: Page index.

	Returns:
		PIL image.
	"""
	document = fitz.open(path)
	page = document[page_number]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _ink_ratio(gray: PIL.Image.Image, box_mm: tuple[float, float, float, float]) -> float:
	"""
	Compute the dark pixel ratio of a region given in millimetres.

	Args:
		gray: Grayscale page image.
		box_mm: Region as (x, y, width, height) from the top-left corner.

	Returns:
		Ink ratio.
	"""
	scale = DPI / MM_PER_INCH
	x, y, width, height = box_mm
	region = gray.crop(
		(
			int(round(x * scale)),
			int(round(y * scale)),
			int(round((x + width) * scale)),
			int(round((y + height) * scale)),
		)
	)
	pixels = list(region.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < INK_THRESHOLD)
	return ink / len(pixels)


#============================================
def _build_items() -> list[tuple[Item, int]]:
	"""
	Two labelled items for rendering.
	"""
	return [
		(Item(1, "simple", name="Blue Ceramic Coffee Mug With Handle", price=9.5, sku="00000000100"), 1),
		(Item(2, "simple", name="Sticker Pack", price=1234.5, sku="00000000200"), 1),
	]


#============================================
def test_fixed_format_render_places_barcode_and_text(tmp_path: pathlib.Path) -> None:
	"""
	Rendered labels carry barcode ink in the barcode box and searchable text.
	"""
	label_size = LABEL_SIZES["40x30"]
	placements = sku_barcode_labels.layout.layout(_build_items(), label_size, 10, ALL_FIELDS)
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	output_pdf = tmp_path / "labels.pdf"
	result = sku_barcode_labels.render.render_labels(placements, label_size, ALL_FIELDS, cache, output_pdf)

	assert result.pages == 1
	assert result.total_labels == 2
	assert result.barcodes_created == 2

	reader = pypdf.PdfReader(str(output_pdf))
	assert len(reader.pages) == 1
	text = reader.pages[0].extract_text()
	assert "00000000100" in text
	assert "00000000200" in text
	assert "$1,234.50" in text

	gray = _render_pdf_page(output_pdf, 0).convert("L")
	barcode_field = [field for field in placements[0].fields if field.field == "barcode"][0]
	box = (barcode_field.x, barcode_field.y, barcode_field.width, barcode_field.height)
	assert _ink_ratio(gray, box) > 0.1

	# third and fourth slots are unused
	assert _ink_ratio(gray, (0.0, 60.0, 40.0, 60.0)) == 0.0


#============================================
def test_grid_render_page_count_and_size(tmp_path: pathlib.Path) -> None:
	"""
	A grid format renders on A4 pages and reuses cached barcodes.
	"""
	label_size = LABEL_SIZES["100x50"]
	item = Item(7, "simple", name="Poster", price=3.0, sku="00000000700")
	placements = sku_barcode_labels.layout.layout([(item, 12)], label_size, 20, ALL_FIELDS)
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	output_pdf = tmp_path / "grid.pdf"
	result = sku_barcode_labels.render.render_labels(placements, label_size, ALL_FIELDS, cache, output_pdf)

	assert result.pages == 2
	assert result.barcodes_created == 1
	reader = pypdf.PdfReader(str(output_pdf))
	assert len(reader.pages) == 2
	width_pt = float(reader.pages[0].mediabox.width)
	height_pt = float(reader.pages[0].mediabox.height)
	assert abs(width_pt - 210.0 * 72.0 / MM_PER_INCH) < 0.5
	assert abs(height_pt - 297.0 * 72.0 / MM_PER_INCH) < 0.5


#============================================
def test_render_without_barcode_field_creates_no_tiles(tmp_path: pathlib.Path) -> None:
	"""
	Leaving out the barcode field never touches the cache.
	"""
	label_size = LABEL_SIZES["52x25"]
	fields = ["name", "sku"]
	placements = sku_barcode_labels.layout.layout(_build_items(), label_size, 10, fields)
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	result = sku_barcode_labels.render.render_labels(placements, label_size, fields, cache, tmp_path / "plain.pdf")
	assert result.barcodes_created == 0
	assert not (tmp_path / "cache").exists()


#============================================
def test_render_empty_batch_writes_nothing(tmp_path: pathlib.Path) -> None:
	"""
	An empty placement list renders zero pages and no file.
	"""
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	output_pdf = tmp_path / "empty.pdf"
	result = sku_barcode_labels.render.render_labels([], LABEL_SIZES["40x30"], ALL_FIELDS, cache, output_pdf)
	assert result.pages == 0
	assert not output_pdf.exists()


#============================================
def test_text_helpers() -> None:
	"""
	Names trim to five words, prices get a currency symbol.
	"""
	assert sku_barcode_labels.render.trim_words("one two three four five six") == "one two three four five…"
	assert sku_barcode_labels.render.trim_words("short name") == "short name"
	assert sku_barcode_labels.render.format_price(9.5) == "$9.50"
	assert sku_barcode_labels.render.format_price(None) == ""
