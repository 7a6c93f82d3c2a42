"""
CLI entry points for SKU allocation and label sheet printing.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.barcode
import sku_barcode_labels.catalog
import sku_barcode_labels.config
import sku_barcode_labels.errors
import sku_barcode_labels.layout
import sku_barcode_labels.render
import sku_barcode_labels.selection
import sku_barcode_labels.sku


LabelRequest = sbl.config.LabelRequest
Settings = sbl.config.Settings

ALLOWED_FIELDS = sbl.config.ALLOWED_FIELDS
LABEL_SIZES = sbl.config.LABEL_SIZES
DEFAULT_CACHE_DIR = "barcode_cache"


#============================================
def parse_ids(values: list[str] | None) -> list[int]:
	"""
	Parse ids given as separate arguments or comma separated lists.

	Args:
		values: Raw argument strings.

	Returns:
		List of integer ids.
	"""
	ids: list[int] = []
	for value in values or []:
		for part in value.split(","):
			part = part.strip()
			if not part:
				continue
			if not part.isdigit():
				raise ValueError(f"Invalid item id: {part!r}")
			ids.append(int(part))
	return ids


#============================================
def build_request(args: argparse.Namespace, settings: Settings) -> LabelRequest:
	"""
	Build a label request from CLI args, falling back to settings.

	Args:
		args: Parsed argparse namespace.
		settings: Loaded settings.

	Returns:
		LabelRequest.
	"""
	label_token = args.label_size or settings.default_label
	label_size = sbl.layout.resolve_label_size(label_token)
	if label_size.token != label_token:
		print(f"Unknown label size {label_token!r}, using {label_size.token}")

	fields = sbl.layout.normalize_fields(args.fields, settings.default_fields)

	print_per_stock = settings.print_per_stock
	if args.print_per_stock is not None:
		print_per_stock = args.print_per_stock

	max_labels = settings.max_labels_per_batch
	if args.max_labels is not None:
		max_labels = max(1, args.max_labels)

	return LabelRequest(
		item_ids=parse_ids(args.items),
		variation_ids=parse_ids(args.variations),
		fields=fields,
		label_size=label_size.token,
		print_per_stock=print_per_stock,
		max_labels=max_labels,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Assign 11-digit SKUs and print barcode label sheets.")
	parser.add_argument("catalog", help="Catalog JSON file.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-i", "--items", dest="items", nargs="+", default=None, help="Product ids, separate or comma separated.")
	input_group.add_argument("-v", "--variations", dest="variations", nargs="+", default=None, help="Variation ids to print.")
	input_group.add_argument("-S", "--settings", dest="settings_path", default=None, help="Settings JSON path.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default="labels.pdf", help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("--cache-dir", dest="cache_dir", default=DEFAULT_CACHE_DIR, help="Barcode cache directory.")

	label_group = parser.add_argument_group("Label")
	label_group.add_argument("-s", "--label-size", dest="label_size", default=None, help=f"Label size: {', '.join(LABEL_SIZES)}.")
	label_group.add_argument("-f", "--fields", dest="fields", nargs="+", choices=ALLOWED_FIELDS, default=None, help="Fields to print.")
	label_group.add_argument("-k", "--print-stock", dest="print_per_stock", action="store_true", help="Print one label per unit in stock.")
	label_group.add_argument("-K", "--no-print-stock", dest="print_per_stock", action="store_false", help="Print one label per item.")
	label_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("-l", "--max-labels", dest="max_labels", type=int, default=None, help="Maximum labels per batch.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("--assign-only", dest="assign_only", action="store_true", help="Assign missing SKUs and stop.")
	behavior_group.add_argument("--clear-cache", dest="clear_cache", action="store_true", help="Remove cached barcode tiles first.")

	parser.set_defaults(
		print_per_stock=None,
		draw_outlines=False,
		assign_only=False,
		clear_cache=False,
	)

	args = parser.parse_args(argv)
	try:
		parse_ids(args.items)
		parse_ids(args.variations)
	except ValueError as error:
		parser.error(str(error))
	return args


#============================================
def run_assign(args: argparse.Namespace, store: sbl.catalog.MemoryCatalog) -> None:
	"""
	Assign SKUs to selected items, or to the whole catalog.

	Args:
		args: Parsed argparse namespace.
		store: Item store.
	"""
	item_ids = parse_ids(args.items) + parse_ids(args.variations)
	if not item_ids:
		item_ids = list(store.items)
	before = {item_id: item.sku for item_id, item in store.items.items()}
	skus = sbl.sku.allocate_missing(store, item_ids, sbl.sku.ParentLocks())
	assigned = 0
	for item_id, sku in skus.items():
		if not before.get(item_id):
			assigned += 1
			print(f"Assigned {sku} to item {item_id}")
	print(f"SKUs assigned: {assigned}")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from selection to label PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	start_time = time.perf_counter()
	settings_path = pathlib.Path(args.settings_path) if args.settings_path else None
	settings = sbl.config.load_settings(settings_path)
	barcode_cache = sbl.barcode.BarcodeCache(pathlib.Path(args.cache_dir))
	if args.clear_cache:
		removed = barcode_cache.purge()
		print(f"Barcode tiles removed: {removed}")

	catalog_path = pathlib.Path(args.catalog)
	store = sbl.catalog.JsonCatalog(catalog_path)
	print(f"Catalog: {catalog_path} ({len(store.items)} items)")

	if args.assign_only:
		run_assign(args, store)
		return

	request = build_request(args, settings)
	label_size = sbl.layout.resolve_label_size(request.label_size)
	output_path = pathlib.Path(args.output_path)
	print(f"Output PDF: {output_path}")
	print(f"Label size: {label_size.token}")
	print(f"Fields: {', '.join(request.fields)}")
	print(f"Print per stock: {request.print_per_stock}")
	print(f"Max labels: {request.max_labels}")

	resolve_start = time.perf_counter()
	items = sbl.selection.resolve_selection(
		store,
		request.item_ids,
		request.variation_ids,
		sbl.sku.ParentLocks(),
	)
	quantities = sbl.selection.build_quantities(items, request.print_per_stock)
	resolve_end = time.perf_counter()
	print(f"Items resolved: {len(items)}")

	layout_start = time.perf_counter()
	placements = sbl.layout.layout(quantities, label_size, request.max_labels, request.fields)
	layout_end = time.perf_counter()
	print(f"Labels laid out: {len(placements)}")

	render_start = time.perf_counter()
	result = sbl.render.render_labels(
		placements,
		label_size,
		request.fields,
		barcode_cache,
		output_path,
		draw_outlines=args.draw_outlines,
	)
	render_end = time.perf_counter()
	print(f"Pages written: {result.pages}")
	print(f"Barcodes created: {result.barcodes_created}, reused: {result.barcodes_reused}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	sbl.render.write_manifest(
		pathlib.Path(manifest_path),
		request,
		placements,
		result,
		label_size,
	)
	print(f"Manifest written: {manifest_path}")

	total_time = time.perf_counter() - start_time
	print(
		"Timing: resolve={:.2f}s layout={:.2f}s render={:.2f}s total={:.2f}s".format(
			resolve_end - resolve_start,
			layout_end - layout_start,
			render_end - render_start,
			total_time,
		)
	)


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except (sbl.errors.BatchLimitExceeded, sbl.errors.NoItemsSelected) as error:
		print(f"Error: {error.message}", file=sys.stderr)
		sys.exit(2)
