from src.core.money import round_money
from src.models.dto.customization import load_customization
from src.models.orm.cart import CartItem
from src.models.orm.product import Product


def cart_item_to_dict(item: CartItem, product: Product | None) -> dict:
    customization = load_customization(item.customization)
    image_url = customization.variant_image or (product.primary_image if product else None)
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": product.name if product else "",
        "product_slug": product.slug if product else None,
        "image_url": image_url,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "line_total": round_money(item.unit_price * item.quantity),
        "lens_index": item.lens_index,
        "lens_coatings": item.lens_coatings or [],
        "prescription_id": item.prescription_id,
        "customization": customization,
        "is_gift": customization.is_gift,
        "product_active": product.is_active if product else False,
        "stock_status": product.stock_status if product else None,
    }
