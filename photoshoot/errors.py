"""Domain errors raised by the session, storage and collage services."""


class PhotoshootError(Exception):
    """Base class for all photo shoot errors."""


class SessionFolderNotFound(PhotoshootError):
    def __init__(self, folder: str):
        super().__init__(f"Folder not found: {folder}")
        self.folder = folder


class InvalidFolderPath(SessionFolderNotFound):
    """Folder path points outside the storage root."""


class NoSourceImages(PhotoshootError):
    def __init__(self, folder: str):
        super().__init__(f"No images found in folder: {folder}")
        self.folder = folder


class ImageDecodeFailure(PhotoshootError):
    def __init__(self, source: str, reason: str = ""):
        message = f"Could not decode image {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source = source


class RemoteUploadFailure(PhotoshootError):
    def __init__(self, key: str, reason: str = ""):
        message = f"Remote upload failed for {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key
