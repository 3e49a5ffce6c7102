class FileDropError(Exception):
    """Base error; `message` is what the client sees, `status_code` is the HTTP status."""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

# client errors
class NoFilesError(FileDropError):
    status_code = 400
    message = "No files uploaded!"

class TooManyFilesError(FileDropError):
    status_code = 400
    message = "Too many files!"

class RecordNotFoundError(FileDropError):
    status_code = 404
    message = "File not found!"

# server errors
class StorageError(FileDropError):
    status_code = 500

class MetadataError(FileDropError):
    status_code = 500
