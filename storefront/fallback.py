"""
Canned products served when neither the store nor the marketplace answers.
"""

from __future__ import annotations

import copy

WHATSAPP = "https://wa.me/5519995189387"

_FALLBACK_PRODUCTS = [
    {
        "id": "mlb-fallback-1",
        "title": "Reparo de Celular - MJ TECH",
        "description": "Conserto profissional de smartphones com garantia e peças de qualidade",
        "image": "https://images.unsplash.com/photo-1563013544-824ae1b704d3?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&q=80",
        "price": "R$ 99,90",
        "oldPrice": "R$ 149,90",
        "discount": "33% OFF",
        "link": f"{WHATSAPP}?text=Olá! Gostaria de informações sobre reparo de celular",
        "condition": "Serviço",
        "available_quantity": 999,
        "sold_quantity": 150,
        "free_shipping": False,
        "category": "SERVIÇOS",
    },
    {
        "id": "mlb-fallback-2",
        "title": "Manutenção de Notebook - MJ TECH",
        "description": "Limpeza interna, formatação e otimização para notebooks e computadores",
        "image": "https://images.unsplash.com/photo-1496181133206-80ce9b88a853?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&q=80",
        "price": "R$ 129,90",
        "oldPrice": "R$ 179,90",
        "discount": "28% OFF",
        "link": f"{WHATSAPP}?text=Olá! Gostaria de informações sobre manutenção de notebook",
        "condition": "Serviço",
        "available_quantity": 999,
        "sold_quantity": 89,
        "free_shipping": False,
        "category": "SERVIÇOS",
    },
    {
        "id": "mlb-fallback-3",
        "title": "Mouse Gamer MJ TECH Edition",
        "description": "Mouse gamer com design exclusivo MJ TECH, RGB e 16000 DPI",
        "image": "https://images.unsplash.com/photo-1527814050087-3793815479db?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&q=80",
        "price": "R$ 79,90",
        "oldPrice": "R$ 119,90",
        "discount": "33% OFF",
        "link": f"{WHATSAPP}?text=Olá! Gostaria de informações sobre o mouse gamer",
        "condition": "Novo",
        "available_quantity": 25,
        "sold_quantity": 42,
        "free_shipping": True,
        "category": "PERIFÉRICOS",
    },
    {
        "id": "mlb-fallback-4",
        "title": "Teclado Mecânico MJ TECH Pro",
        "description": "Teclado mecânico com switches Outemu Blue e iluminação RGB",
        "image": "https://images.unsplash.com/photo-1541140532154-b024d705b90a?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&q=80",
        "price": "R$ 189,90",
        "oldPrice": "R$ 279,90",
        "discount": "32% OFF",
        "link": f"{WHATSAPP}?text=Olá! Gostaria de informações sobre o teclado mecânico",
        "condition": "Novo",
        "available_quantity": 18,
        "sold_quantity": 31,
        "free_shipping": True,
        "category": "PERIFÉRICOS",
    },
]


def fallback_products() -> list[dict]:
    return copy.deepcopy(_FALLBACK_PRODUCTS)
