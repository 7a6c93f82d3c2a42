"""
Resolve a product selection into printable items.
"""

# Standard Library
import typing

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.catalog
import sku_barcode_labels.errors
import sku_barcode_labels.layout
import sku_barcode_labels.sku


Item = sbl.catalog.Item
ItemStore = sbl.catalog.ItemStore
ItemNotFound = sbl.errors.ItemNotFound
NoItemsSelected = sbl.errors.NoItemsSelected
ParentLocks = sbl.sku.ParentLocks


#============================================
def unique_ids(values: typing.Iterable[int]) -> list[int]:
	"""
	Drop zero and repeated ids, keeping first occurrences in order.

	Args:
		values: Raw ids.

	Returns:
		De-duplicated positive ids.
	"""
	seen: set[int] = set()
	result: list[int] = []
	for value in values:
		value = abs(int(value))
		if value == 0 or value in seen:
			continue
		seen.add(value)
		result.append(value)
	return result


#============================================
def get_required_item(store: ItemStore, item_id: int) -> Item:
	"""
	Look up an item that must exist.

	Args:
		store: Item store.
		item_id: Item id.

	Returns:
		The item.
	"""
	item = store.get_item(item_id)
	if item is None:
		raise ItemNotFound(item_id)
	return item


#============================================
def resolve_selection(
	store: ItemStore,
	item_ids: typing.Iterable[int],
	variation_ids: typing.Iterable[int] = (),
	locks: ParentLocks | None = None,
) -> list[Item]:
	"""
	Turn selected product and variation ids into printable items.

	Every resolved item gets a SKU. A variable product expands into its
	selected variations, or into all of them when none was selected.
	Ids with no backing item are skipped.

	Args:
		store: Item store and uniqueness oracle.
		item_ids: Selected product ids.
		variation_ids: Selected variation ids.
		locks: Optional per-parent locks for SKU allocation.

	Returns:
		Ordered list of printable items.
	"""
	variation_filter = unique_ids(variation_ids)
	selected_ids = unique_ids(list(item_ids) + variation_filter)

	resolved: dict[int, Item] = {}
	for item_id in selected_ids:
		try:
			item = get_required_item(store, item_id)
		except ItemNotFound as error:
			print(f"Skipping: {error.message}")
			continue

		sbl.sku.ensure_sku(item, store, locks)

		if item.is_variation:
			resolved.setdefault(item.item_id, item)
			continue

		if item.is_variable:
			children = store.get_children(item.item_id)
			selected_for_parent = [child for child in variation_filter if child in children]
			targets = selected_for_parent or children
			for variation_id in targets:
				variation = store.get_item(variation_id)
				if variation is None:
					continue
				sbl.sku.ensure_sku(variation, store, locks)
				resolved.setdefault(variation.item_id, variation)
			continue

		resolved.setdefault(item.item_id, item)

	if not resolved:
		raise NoItemsSelected()
	return list(resolved.values())


#============================================
def build_quantities(items: list[Item], print_per_stock: bool) -> list[tuple[Item, int]]:
	"""
	Pair each item with its label quantity.

	Args:
		items: Printable items.
		print_per_stock: Print one label per unit in stock.

	Returns:
		Ordered (item, quantity) pairs.
	"""
	return [(item, sbl.layout.label_quantity(item, print_per_stock)) for item in items]
