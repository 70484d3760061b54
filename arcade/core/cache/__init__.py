"""
In-process caches.

- ``AvatarImageCache``: explicit load-once avatar id -> image URL mapping
- ``resolve_image_url``: stored image reference -> URL
"""

from arcade.core.cache.avatar_image_cache import (
    AvatarImageCache,
    ImageLoader,
    resolve_image_url,
)

__all__ = ["AvatarImageCache", "ImageLoader", "resolve_image_url"]
