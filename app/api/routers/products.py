# app/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_catalog
from app.domain.schemas import ProductOut
from app.services.woocommerce_client import WooCommerceClient

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/barcode/{barcode}", response_model=ProductOut)
def get_product_by_barcode(barcode: str, catalog: WooCommerceClient = Depends(get_catalog)):
    """
    Wyszukiwanie produktu po kodzie kreskowym (skaner przy kasie).
    """
    product = catalog.find_product_by_barcode(barcode)
    if product is None:
        raise HTTPException(status_code=404, detail="Produkt nie znaleziony")
    return ProductOut(
        id=product.id,
        name=product.name,
        regular_price=product.regular_price,
        sale_price=product.sale_price,
        price=product.effective_price,
        sku=product.sku,
        barcode=product.barcode,
    )
