"""
Product service: catalog CRUD with cache-aside reads.
"""

from app.cache.keys import EntityKind
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductRead
from app.services.cached_service import CachedEntityService


class ProductService(CachedEntityService[Product]):
    """Products: search on name/description, exact filter on category."""

    kind = EntityKind.PRODUCT
    model = Product
    detail_schema = ProductRead
    list_item_schema = ProductRead
    search_fields = ("name", "description")
    filter_field = "category"
    sort_orders = {
        "price_asc": ("price", False),
        "price_desc": ("price", True),
        "name_asc": ("name", False),
        "name_desc": ("name", True),
    }

    def create(self, product_in: ProductCreate) -> ProductRead:
        product = Product(**product_in.model_dump())
        return ProductRead.model_validate(self.insert(product))
