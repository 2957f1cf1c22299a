"""Warehouse barcode stock scanner backed by SAP."""

__version__ = "1.0.0"
