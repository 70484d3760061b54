from arcade.modules.avatar.service import AvatarService

__all__ = ["AvatarService"]
