"""
Code 128 barcode tiles cached on disk by payload hash.
"""

# Standard Library
import hashlib
import pathlib

# PIP3 modules
import reportlab.graphics.barcode.code128
import reportlab.pdfgen.canvas

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.config


BARCODE_BAR_WIDTH = sbl.config.BARCODE_BAR_WIDTH
BARCODE_BAR_HEIGHT = sbl.config.BARCODE_BAR_HEIGHT
BARCODE_QUIET_ZONE = sbl.config.BARCODE_QUIET_ZONE
TILE_SUFFIX = ".pdf"


#============================================
def cache_key(payload: str) -> str:
	"""
	Content hash used as the cache key for a barcode payload.

	Args:
		payload: Barcode payload.

	Returns:
		MD5 hex digest.
	"""
	return hashlib.md5(payload.encode("utf-8")).hexdigest()


#============================================
def render_barcode_pdf(payload: str, output_path: pathlib.Path) -> tuple[float, float]:
	"""
	Render a Code 128 barcode into a single-page PDF tile.

	Args:
		payload: Barcode payload.
		output_path: Output PDF path.

	Returns:
		Tile size in points as (width, height).
	"""
	barcode = reportlab.graphics.barcode.code128.Code128(
		payload,
		barWidth=BARCODE_BAR_WIDTH,
		barHeight=BARCODE_BAR_HEIGHT,
		lquiet=BARCODE_QUIET_ZONE,
		rquiet=BARCODE_QUIET_ZONE,
	)
	width, height = barcode.wrap(0, 0)
	pdf = reportlab.pdfgen.canvas.Canvas(str(output_path), pagesize=(width, height))
	barcode.drawOn(pdf, 0, 0)
	pdf.save()
	return (width, height)


class BarcodeCache:
	"""
	Directory of barcode tiles keyed by payload hash.

	Entries are never rewritten once created; purge() is the only way to
	drop them.
	"""

	def __init__(self, directory: pathlib.Path) -> None:
		self.directory = directory
		self.created = 0
		self.reused = 0

	def path_for(self, payload: str) -> pathlib.Path:
		return self.directory / f"{cache_key(payload)}{TILE_SUFFIX}"

	def get_or_create_barcode_image(self, payload: str) -> pathlib.Path:
		"""
		Return the cached tile for a payload, rendering it on first use.

		Args:
			payload: Barcode payload.

		Returns:
			Path to the tile PDF.
		"""
		path = self.path_for(payload)
		if path.exists():
			self.reused += 1
			return path
		self.directory.mkdir(parents=True, exist_ok=True)
		render_barcode_pdf(payload, path)
		self.created += 1
		return path

	def purge(self) -> int:
		"""
		Remove every cached tile.

		Returns:
			Number of tiles removed.
		"""
		if not self.directory.is_dir():
			return 0
		removed = 0
		for path in sorted(self.directory.glob(f"*{TILE_SUFFIX}")):
			path.unlink()
			removed += 1
		return removed
