import pytest

import sku_barcode_labels.catalog
import sku_barcode_labels.config
import sku_barcode_labels.errors
import sku_barcode_labels.layout


Item = sku_barcode_labels.catalog.Item
BatchLimitExceeded = sku_barcode_labels.errors.BatchLimitExceeded
LABEL_SIZES = sku_barcode_labels.config.LABEL_SIZES


#============================================
def build_pairs(quantities: list[int]) -> list[tuple[Item, int]]:
	"""
	Pair fresh items with the given quantities.

	Args:
		quantities: Label quantity per item.

	Returns:
		List of (item, quantity) pairs.
	"""
	pairs = []
	for index, quantity in enumerate(quantities, start=1):
		pairs.append((Item(index, "simple", sku=f"{index:09d}00"), quantity))
	return pairs


#============================================
def test_limit_exceeded_rejects_whole_batch() -> None:
	"""
	Quantities 2+2+2 against a limit of 5 fail and produce no placements.
	"""
	placements = None
	with pytest.raises(BatchLimitExceeded) as caught:
		placements = sku_barcode_labels.layout.layout(build_pairs([2, 2, 2]), LABEL_SIZES["40x30"], 5)
	assert placements is None
	assert caught.value.requested == 6
	assert caught.value.limit == 5
	assert "Reduce quantity" in caught.value.message


#============================================
def test_limit_checked_before_expanding_item() -> None:
	"""
	The first item alone exceeding the limit fails immediately.
	"""
	with pytest.raises(BatchLimitExceeded) as caught:
		sku_barcode_labels.layout.expand_items(build_pairs([7, 1]), 5)
	assert caught.value.requested == 7


#============================================
def test_batch_exactly_at_limit_is_accepted() -> None:
	"""
	Reaching the limit exactly is allowed.
	"""
	placements = sku_barcode_labels.layout.layout(build_pairs([2, 3]), LABEL_SIZES["52x25"], 5)
	assert len(placements) == 5


#============================================
def test_zero_quantities_count_as_one_against_limit() -> None:
	"""
	Normalized quantities are what the limit sees.
	"""
	with pytest.raises(BatchLimitExceeded):
		sku_barcode_labels.layout.layout(build_pairs([0, 0, 0]), LABEL_SIZES["40x30"], 2)


#============================================
def test_limit_must_be_positive() -> None:
	"""
	A limit below 1 is a programming error.
	"""
	with pytest.raises(ValueError):
		sku_barcode_labels.layout.layout(build_pairs([1]), LABEL_SIZES["40x30"], 0)


#============================================
def test_batch_error_serializes() -> None:
	"""
	The error converts to a dictionary for reporting.
	"""
	error = BatchLimitExceeded(12, 10)
	data = error.to_dict()
	assert data["error"] == "BatchLimitExceeded"
	assert data["code"] == "batch_limit_exceeded"
	assert str(error).startswith("[batch_limit_exceeded]")
