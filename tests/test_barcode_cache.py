import hashlib
import pathlib

import pypdf

import sku_barcode_labels.barcode


#============================================
def test_tile_is_keyed_by_payload_hash(tmp_path: pathlib.Path) -> None:
	"""
	A new payload renders one PDF tile named by its MD5 digest.
	"""
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	path = cache.get_or_create_barcode_image("00000000100")
	expected = hashlib.md5(b"00000000100").hexdigest() + ".pdf"
	assert path.name == expected
	assert path.exists()
	reader = pypdf.PdfReader(str(path))
	assert len(reader.pages) == 1
	assert float(reader.pages[0].mediabox.width) > float(reader.pages[0].mediabox.height)


#============================================
def test_cached_tile_is_reused(tmp_path: pathlib.Path) -> None:
	"""
	A second lookup returns the same file without rewriting it.
	"""
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	first = cache.get_or_create_barcode_image("00000001001")
	stamp = first.stat().st_mtime_ns
	second = cache.get_or_create_barcode_image("00000001001")
	assert second == first
	assert second.stat().st_mtime_ns == stamp
	assert cache.created == 1
	assert cache.reused == 1


#============================================
def test_purge_removes_tiles(tmp_path: pathlib.Path) -> None:
	"""
	Purging deletes every cached tile and reports the count.
	"""
	cache = sku_barcode_labels.barcode.BarcodeCache(tmp_path / "cache")
	assert cache.purge() == 0
	cache.get_or_create_barcode_image("00000000100")
	cache.get_or_create_barcode_image("00000000200")
	assert cache.purge() == 2
	assert list((tmp_path / "cache").glob("*.pdf")) == []
