"""
Pytest configuration: local imports and a shared sample catalog.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest


#============================================
def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path so the package imports
	without an install.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()
import sku_barcode_labels.catalog


#============================================
def build_sample_items() -> list[sku_barcode_labels.catalog.Item]:
	"""
	Build a small catalog: two simple products and one variable product
	with three variations.
	"""
	Item = sku_barcode_labels.catalog.Item
	return [
		Item(1, "simple", name="Blue Mug", price=9.5, stock_quantity=3),
		Item(10, "variable", name="T-Shirt", price=None, children=[11, 12, 13]),
		Item(11, "variation", name="T-Shirt - S", price=15.0, parent_id=10, stock_quantity=2),
		Item(12, "variation", name="T-Shirt - M", price=15.0, parent_id=10, stock_quantity=0),
		Item(13, "variation", name="T-Shirt - L", price=16.0, parent_id=10, stock_quantity=None),
		Item(20, "simple", name="Sticker Pack", price=2.0, sku="CUSTOM-20", stock_quantity=1),
	]


#============================================
@pytest.fixture
def sample_catalog() -> sku_barcode_labels.catalog.MemoryCatalog:
	"""
	Fresh in-memory catalog for each test.
	"""
	return sku_barcode_labels.catalog.MemoryCatalog(build_sample_items())
