"""Record factories shared by the search, scoring and engine tests."""

from storefront.catalog.records import ProductRecord, VariantRecord


def make_variant(id=1, **kwargs) -> VariantRecord:
    return VariantRecord(id=id, **kwargs)


def make_product(id, name, variants=(), **kwargs) -> ProductRecord:
    values = dict(price=10.0, original_price=10.0, rating=0.0, reviews=0, in_stock=True)
    values.update(kwargs)
    return ProductRecord(id=id, name=name, variants=tuple(variants), **values)
