"""Economy models: shop listings, ownership and the audit log."""

from .player_avatar import PlayerAvatar
from .shop_item import ShopItem
from .transaction_log import TransactionLog

__all__ = ["PlayerAvatar", "ShopItem", "TransactionLog"]
