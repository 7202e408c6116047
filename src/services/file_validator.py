"""
Sanity checks for netstat capture files.

Checks only log warnings; a capture that fails them is still parsed, and
any real problem surfaces as a parse error on a specific line.
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Captures of a looping netstat run over several days stay well below this
MAX_FILE_SIZE_BYTES = 200 * 1024 * 1024

# Extensions capture scripts usually write
ALLOWED_EXTENSIONS = frozenset({".txt", ".log", ".out", ".netstat"})

# Byte order marks left by Windows editors and PowerShell redirection
BOMS = {
    b"\xef\xbb\xbf": "utf-8-sig",
    b"\xff\xfe": "utf-16",
    b"\xfe\xff": "utf-16",
}


class FileValidationResult:
    """Result of capture validation checks."""

    def __init__(self):
        self.warnings: list[str] = []
        self.encoding: str = "utf-8"


def check_file_size(content_length: int) -> Optional[str]:
    """Return a warning if the capture is unusually large."""
    if content_length > MAX_FILE_SIZE_BYTES:
        return (
            f"File size ({content_length / 1024 / 1024:.1f} MB) exceeds "
            f"{MAX_FILE_SIZE_BYTES / 1024 / 1024:.0f} MB"
        )
    return None


def check_file_extension(filename: Optional[str]) -> Optional[str]:
    """Return a warning if the extension is not a usual capture extension."""
    if not filename:
        return None
    ext = Path(filename).suffix.lower()
    if ext and ext not in ALLOWED_EXTENSIONS:
        return f"File extension '{ext}' is not a usual capture extension: {sorted(ALLOWED_EXTENSIONS)}"
    return None


def detect_encoding(content: bytes) -> str:
    """Pick the text encoding from a leading byte order mark, utf-8 otherwise."""
    for bom, encoding in BOMS.items():
        if content.startswith(bom):
            return encoding
    return "utf-8"


def validate_capture(filename: Optional[str], content: bytes) -> FileValidationResult:
    """Run all checks on a capture and log what looks suspicious."""
    result = FileValidationResult()

    size_warning = check_file_size(len(content))
    if size_warning:
        result.warnings.append(size_warning)

    ext_warning = check_file_extension(filename)
    if ext_warning:
        result.warnings.append(ext_warning)

    result.encoding = detect_encoding(content)
    if result.encoding == "utf-8":
        try:
            content.decode("utf-8")
        except UnicodeDecodeError as e:
            result.warnings.append(f"Capture is not valid UTF-8 (offset {e.start}), undecodable bytes replaced")

    for warning in result.warnings:
        logger.warning(f"File validation: {warning}")
    if not result.warnings:
        logger.debug(f"File validation passed: {filename} ({result.encoding})")

    return result


def read_capture(path: Path) -> str:
    """Read a capture file as text after validating it."""
    content = path.read_bytes()
    result = validate_capture(path.name, content)
    return content.decode(result.encoding, errors="replace")
