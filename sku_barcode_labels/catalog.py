"""
Catalog items and the JSON-file item store.
"""

# Standard Library
import dataclasses
import json
import pathlib
import typing


KIND_SIMPLE = "simple"
KIND_VARIABLE = "variable"
KIND_VARIATION = "variation"
ITEM_KINDS = (KIND_SIMPLE, KIND_VARIABLE, KIND_VARIATION)


@dataclasses.dataclass
class Item:
	item_id: int
	kind: str = KIND_SIMPLE
	name: str = ""
	price: float | None = None
	sku: str = ""
	stock_quantity: int | None = None
	parent_id: int | None = None
	children: list[int] = dataclasses.field(default_factory=list)

	@property
	def is_variation(self) -> bool:
		return self.kind == KIND_VARIATION

	@property
	def is_variable(self) -> bool:
		return self.kind == KIND_VARIABLE

	@property
	def barcode_payload(self) -> str:
		return self.sku


class ItemStore(typing.Protocol):
	"""
	Item lookup, persistence and SKU uniqueness queries.
	"""

	def get_item(self, item_id: int) -> Item | None: ...

	def get_children(self, parent_id: int) -> list[int]: ...

	def set_sku(self, item: Item, sku: str) -> None: ...

	def save(self, item: Item) -> None: ...

	def sku_in_use(self, sku: str) -> bool: ...


#============================================
def item_from_dict(data: dict) -> Item:
	"""
	Build an Item from a catalog JSON entry.

	Args:
		data: Mapping with at least an "id" key.

	Returns:
		Item instance.
	"""
	kind = str(data.get("kind", KIND_SIMPLE))
	if kind not in ITEM_KINDS:
		raise ValueError(f"Unknown item kind {kind!r} for item {data.get('id')}")
	stock = data.get("stock_quantity")
	price = data.get("price")
	parent_id = data.get("parent_id")
	return Item(
		item_id=int(data["id"]),
		kind=kind,
		name=str(data.get("name", "")),
		price=float(price) if price is not None else None,
		sku=str(data.get("sku") or ""),
		stock_quantity=int(stock) if stock is not None else None,
		parent_id=int(parent_id) if parent_id is not None else None,
		children=[int(child) for child in data.get("children", [])],
	)


#============================================
def item_to_dict(item: Item) -> dict:
	"""
	Convert an Item back to its catalog JSON form.

	Args:
		item: Item instance.

	Returns:
		JSON-ready dictionary.
	"""
	data = {
		"id": item.item_id,
		"kind": item.kind,
		"name": item.name,
		"price": item.price,
		"sku": item.sku,
		"stock_quantity": item.stock_quantity,
	}
	if item.parent_id is not None:
		data["parent_id"] = item.parent_id
	if item.children:
		data["children"] = list(item.children)
	return data


class MemoryCatalog:
	"""
	In-memory item store keyed by item id.

	Variation children are derived from parent_id when a variable item does
	not list them explicitly.
	"""

	def __init__(self, items: typing.Iterable[Item] = ()) -> None:
		self.items: dict[int, Item] = {}
		for item in items:
			self.items[item.item_id] = item
		self.saved: list[int] = []

	def get_item(self, item_id: int) -> Item | None:
		return self.items.get(item_id)

	def get_children(self, parent_id: int) -> list[int]:
		parent = self.items.get(parent_id)
		if parent is not None and parent.children:
			return list(parent.children)
		return [
			item.item_id for item in self.items.values()
			if item.is_variation and item.parent_id == parent_id
		]

	def set_sku(self, item: Item, sku: str) -> None:
		item.sku = sku

	def save(self, item: Item) -> None:
		self.items[item.item_id] = item
		self.saved.append(item.item_id)

	def sku_in_use(self, sku: str) -> bool:
		return any(item.sku == sku for item in self.items.values())


class JsonCatalog(MemoryCatalog):
	"""
	Item store backed by a JSON file holding a list of item objects.
	"""

	def __init__(self, path: pathlib.Path) -> None:
		self.path = path
		text = path.read_text(encoding="utf-8")
		entries = json.loads(text)
		if isinstance(entries, dict):
			entries = entries.get("items", [])
		super().__init__(item_from_dict(entry) for entry in entries)

	def save(self, item: Item) -> None:
		super().save(item)
		self.write()

	def write(self) -> None:
		"""
		Write every item back to the catalog file.
		"""
		payload = [item_to_dict(item) for item in self.items.values()]
		text = json.dumps(payload, indent=2, ensure_ascii=False)
		self.path.write_text(text + "\n", encoding="utf-8")
