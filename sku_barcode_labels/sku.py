"""
11-digit SKU allocation for products and their variations.
"""

# Standard Library
import contextlib
import re
import threading
import typing

# local repo modules
import sku_barcode_labels as sbl
import sku_barcode_labels.catalog
import sku_barcode_labels.config
import sku_barcode_labels.errors


Item = sbl.catalog.Item
ItemStore = sbl.catalog.ItemStore
ParentMissing = sbl.errors.ParentMissing
SkuSpaceExhausted = sbl.errors.SkuSpaceExhausted

SKU_LENGTH = sbl.config.SKU_LENGTH
SKU_PREFIX_LENGTH = sbl.config.SKU_PREFIX_LENGTH
SKU_SUFFIX_LENGTH = sbl.config.SKU_SUFFIX_LENGTH
SKU_MODULUS = sbl.config.SKU_MODULUS
MAX_VARIANT_SEQUENCE = sbl.config.MAX_VARIANT_SEQUENCE


class ParentLocks:
	"""
	One lock per parent id, serializing the sibling scan of its variations.
	"""

	def __init__(self) -> None:
		self._guard = threading.Lock()
		self._locks: dict[int, threading.Lock] = {}

	def get(self, parent_id: int) -> threading.Lock:
		with self._guard:
			lock = self._locks.get(parent_id)
			if lock is None:
				lock = threading.Lock()
				self._locks[parent_id] = lock
			return lock

	@contextlib.contextmanager
	def hold(self, parent_id: int) -> typing.Iterator[None]:
		lock = self.get(parent_id)
		with lock:
			yield


#============================================
def format_prefix(item_id: int) -> str:
	"""
	Zero-pad an item id to the 9-digit SKU prefix.

	Args:
		item_id: Product or parent id.

	Returns:
		Prefix string.
	"""
	return f"{item_id:0{SKU_PREFIX_LENGTH}d}"


#============================================
def pad_sku(value: int) -> str:
	"""
	Zero-pad a numeric SKU value to 11 digits.

	Args:
		value: Numeric SKU value.

	Returns:
		SKU string.
	"""
	return f"{value:0{SKU_LENGTH}d}"


#============================================
def is_valid_sku(value: str) -> bool:
	"""
	Check for an 11-digit ASCII numeric SKU.

	Args:
		value: Candidate SKU.

	Returns:
		True when the value is 11 ASCII digits.
	"""
	return len(value) == SKU_LENGTH and value.isascii() and value.isdigit()


#============================================
def taken_sequences(store: ItemStore, parent_id: int, prefix: str) -> set[int]:
	"""
	Collect variation suffixes already used under a parent prefix.

	Args:
		store: Item store.
		parent_id: Parent product id.
		prefix: 9-digit parent prefix.

	Returns:
		Set of taken two-digit suffix values.
	"""
	pattern = re.compile("^" + re.escape(prefix) + r"(\d{2})$")
	taken: set[int] = set()
	for child_id in store.get_children(parent_id):
		child = store.get_item(child_id)
		if child is None:
			continue
		match = pattern.match(child.sku or "")
		if match:
			taken.add(int(match.group(1)))
	return taken


#============================================
def next_sequence(taken: set[int]) -> int:
	"""
	Pick the smallest free variation sequence.

	Args:
		taken: Suffix values already in use.

	Returns:
		Smallest free value in 1..99, or 0 when all are taken.
	"""
	for sequence in range(1, MAX_VARIANT_SEQUENCE + 1):
		if sequence not in taken:
			return sequence
	return 0


#============================================
def get_parent(item: Item, store: ItemStore) -> Item:
	"""
	Look up the parent product of a variation.

	Args:
		item: Variation item.
		store: Item store.

	Returns:
		Parent item.
	"""
	parent_id = item.parent_id or 0
	parent = store.get_item(parent_id)
	if parent is None:
		raise ParentMissing(item.item_id, parent_id)
	return parent


#============================================
def build_base_sku(item: Item, store: ItemStore) -> str:
	"""
	Compute the base SKU candidate before collision probing.

	Args:
		item: Item needing a SKU.
		store: Item store used to resolve the parent and siblings.

	Returns:
		11-digit candidate SKU.
	"""
	if not item.is_variation:
		return format_prefix(item.item_id) + "00"

	try:
		parent = get_parent(item, store)
	except ParentMissing as error:
		# degrade to the raw parent reference, no sibling scan
		print(f"Warning: {error.message}; using parent id {error.parent_id} as SKU prefix")
		prefix = format_prefix(error.parent_id)
		taken: set[int] = set()
	else:
		prefix = format_prefix(parent.item_id)
		taken = taken_sequences(store, parent.item_id, prefix)

	sequence = next_sequence(taken)
	if sequence == 0:
		print(f"Warning: all variation suffixes under {prefix} are taken; probing from {prefix}00")
	return prefix + f"{sequence:0{SKU_SUFFIX_LENGTH}d}"


#============================================
def resolve_collisions(
	candidate: str,
	sku_in_use: typing.Callable[[str], bool],
	max_probes: int | None = None,
) -> str:
	"""
	Linear-probe the candidate until the uniqueness oracle reports it free.

	Args:
		candidate: Starting 11-digit SKU.
		sku_in_use: Oracle answering whether a SKU is already assigned.
		max_probes: Optional probe limit, defaults to the whole SKU space.

	Returns:
		First free SKU at or after the candidate.
	"""
	if max_probes is None:
		max_probes = SKU_MODULUS
	sku = candidate
	probes = 0
	while sku_in_use(sku):
		probes += 1
		if probes >= max_probes:
			raise SkuSpaceExhausted(candidate)
		sku = pad_sku((int(sku) + 1) % SKU_MODULUS)
	return sku


#============================================
def generate_sku(item: Item, store: ItemStore) -> str:
	"""
	Generate a unique SKU for an item without persisting it.

	Args:
		item: Item needing a SKU.
		store: Item store and uniqueness oracle.

	Returns:
		Unique 11-digit SKU.
	"""
	candidate = build_base_sku(item, store)
	return resolve_collisions(candidate, store.sku_in_use)


#============================================
def ensure_sku(item: Item, store: ItemStore, locks: ParentLocks | None = None) -> str:
	"""
	Return the item's SKU, allocating and saving one when it is empty.

	A non-empty SKU is returned unchanged and the store is not touched.

	Args:
		item: Item to check.
		store: Item store and uniqueness oracle.
		locks: Optional per-parent locks for concurrent hosts.

	Returns:
		The item's SKU.
	"""
	if item.sku:
		return item.sku
	if locks is not None and item.is_variation and item.parent_id is not None:
		with locks.hold(item.parent_id):
			return _allocate(item, store)
	return _allocate(item, store)


#============================================
def _allocate(item: Item, store: ItemStore) -> str:
	# re-check under the lock, a sibling call may have filled it
	if item.sku:
		return item.sku
	sku = generate_sku(item, store)
	store.set_sku(item, sku)
	store.save(item)
	return sku


#============================================
def allocate_missing(
	store: ItemStore,
	item_ids: typing.Iterable[int],
	locks: ParentLocks | None = None,
) -> dict[int, str]:
	"""
	Ensure SKUs for many items, skipping ids with no backing item.

	Args:
		store: Item store and uniqueness oracle.
		item_ids: Item ids to process in order.
		locks: Optional per-parent locks.

	Returns:
		Mapping of item id to its SKU.
	"""
	skus: dict[int, str] = {}
	for item_id in item_ids:
		item = store.get_item(item_id)
		if item is None:
			print(f"Skipping missing item {item_id}")
			continue
		skus[item_id] = ensure_sku(item, store, locks)
	return skus
