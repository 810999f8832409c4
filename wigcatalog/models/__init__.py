from wigcatalog.models.color import Color
from wigcatalog.models.product import Product, ProductType, Category
from wigcatalog.models.variant import Variant
from wigcatalog.models.image import VariantImage
from wigcatalog.models.comment import Comment

__all__ = [
    "Color",
    "Product",
    "ProductType",
    "Category",
    "Variant",
    "VariantImage",
    "Comment",
]
