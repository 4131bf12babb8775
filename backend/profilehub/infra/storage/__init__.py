from .local_picture_storage import LocalPictureStorage

__all__ = ["LocalPictureStorage"]
