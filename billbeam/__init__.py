"""BillBeam: split a restaurant bill from a photo of the receipt."""

__version__ = "0.1.0"
