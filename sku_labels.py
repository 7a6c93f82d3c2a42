#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Assign 11-digit SKUs and print barcode label sheets from a catalog file.
"""

import sku_barcode_labels.cli


if __name__ == "__main__":
	sku_barcode_labels.cli.main()
