"""
Error types raised by SKU allocation and label layout.
"""


class LabelError(Exception):
	"""
	Base error for the SKU and label pipeline.
	"""

	default_message = "Label processing error"

	def __init__(self, message: str | None = None, code: str | None = None) -> None:
		self.message = message or self.default_message
		self.code = code
		super().__init__(self.message)

	def __str__(self) -> str:
		if self.code:
			return f"[{self.code}] {self.message}"
		return self.message

	def to_dict(self) -> dict:
		"""
		Convert the error to a dictionary for manifests and reports.

		Returns:
			Dictionary with error class, message and optional code.
		"""
		data = {
			"error": self.__class__.__name__,
			"message": self.message,
		}
		if self.code:
			data["code"] = self.code
		return data


class ItemNotFound(LabelError):
	default_message = "Item not found"

	def __init__(self, item_id: int) -> None:
		self.item_id = item_id
		super().__init__(f"Item {item_id} not found", code="item_not_found")


class ParentMissing(LabelError):
	default_message = "Variant parent not found"

	def __init__(self, item_id: int, parent_id: int) -> None:
		self.item_id = item_id
		self.parent_id = parent_id
		super().__init__(
			f"Parent {parent_id} of variation {item_id} not found",
			code="parent_missing",
		)


class BatchLimitExceeded(LabelError):
	default_message = (
		"Label request exceeds the configured batch limit. "
		"Reduce quantity or disable per-stock printing."
	)

	def __init__(self, requested: int, limit: int) -> None:
		self.requested = requested
		self.limit = limit
		super().__init__(
			f"{self.default_message} (requested at least {requested}, limit {limit})",
			code="batch_limit_exceeded",
		)


class NoItemsSelected(LabelError):
	default_message = "No products selected for printing."

	def __init__(self) -> None:
		super().__init__(self.default_message, code="no_items_selected")


class SkuSpaceExhausted(LabelError):
	default_message = "No free SKU value left in the 11-digit space"

	def __init__(self, start: str) -> None:
		self.start = start
		super().__init__(
			f"{self.default_message} (probing started at {start})",
			code="sku_space_exhausted",
		)
