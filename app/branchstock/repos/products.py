from uuid import UUID

from app.branchstock.db.models import Product, ProductVariation


class ProductRepository:
    def __init__(self, db):
        self.db = db

    def get_product(self, product_id: UUID) -> Product | None:
        return self.db.get(Product, product_id)

    def get_variation(self, variation_id: UUID) -> ProductVariation | None:
        return self.db.get(ProductVariation, variation_id)

    def get_product_variation(self, product_id: UUID, variation_id: UUID) -> ProductVariation | None:
        """The variation, or None when it is missing or belongs to another product."""
        variation = self.get_variation(variation_id)
        if variation is None or variation.product_id != product_id:
            return None
        return variation
