from arcade.modules.shop.service import PurchaseResult, ShopService

__all__ = ["PurchaseResult", "ShopService"]
