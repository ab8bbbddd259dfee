"""Registry models."""
from pitchvault.models.file_record import AccessMode, FileRecord

__all__ = ["AccessMode", "FileRecord"]
