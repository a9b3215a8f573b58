"""Textile catalog management service.

Products, color variants, a category/subcategory/fabric-type hierarchy,
filtering, and sharing of variant images.
"""

__version__ = "0.1.0"
