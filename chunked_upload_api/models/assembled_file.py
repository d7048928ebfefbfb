"""
Domain model for the durable output of a chunked upload.
"""


class AssembledFile:
    """A file assembled from every chunk of an upload session, in index order."""

    def __init__(
        self,
        file_name: str,
        file_path: str,
        file_url: str,
        file_size: int,
        mime_type: str
    ):
        self.file_name = file_name
        self.file_path = file_path
        self.file_url = file_url
        self.file_size = file_size
        self.mime_type = mime_type

    def __repr__(self):
        return f"AssembledFile(file_path={self.file_path}, file_size={self.file_size})"
