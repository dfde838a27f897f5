# storefront/seed.py
from decimal import Decimal

from .store import OrderStore

SEED_PRODUCTS = [
    {
        "name": "Açaí 300ml",
        "description": "Açaí cremoso com granola e banana",
        "price": Decimal("12.90"),
        "size": "300ml",
        "image": "/assets/generated_images/Small_açaí_bowl_product_e5ef7191.png",
    },
    {
        "name": "Açaí 500ml",
        "description": "Açaí tradicional com frutas e complementos",
        "price": Decimal("18.90"),
        "size": "500ml",
        "image": "/assets/generated_images/Large_açaí_bowl_product_185591f7.png",
    },
    {
        "name": "Combo Quero+ Açaí",
        "description": "2 açaís de 300ml - Economize!",
        "price": Decimal("22.90"),
        "size": "2x 300ml",
        "image": "/assets/generated_images/Açaí_combo_product_image_5986e6cc.png",
    },
]


def seed_products(store: OrderStore) -> bool:
    """Insere o cardápio inicial. Retorna False se já havia produtos."""
    if store.get_all_products():
        return False
    for data in SEED_PRODUCTS:
        store.create_product(dict(data))
    return True
