"""Custom exceptions for the ingestion pipeline."""


class IngestionError(Exception):
    """Base exception for ingestion errors."""

    pass


class RegistryLoadError(IngestionError):
    """Failed to load the platform rule registry."""

    pass


class UnsupportedFileError(IngestionError):
    """File is not a CSV export."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"{filename} is not a CSV file")


class FileReadError(IngestionError):
    """File could not be read or decoded."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to read {filename}: {reason}")
