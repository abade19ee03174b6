"""Extension based file categorisation."""

from pathlib import PurePath

from ..models.files import Category

CATEGORY_EXTENSIONS: dict[Category, frozenset[str]] = {
    Category.IMAGES: frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg", ".ico"}),
    Category.DOCUMENTS: frozenset({
        ".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt", ".xls", ".xlsx", ".ppt", ".pptx",
    }),
    Category.VIDEOS: frozenset({".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v"}),
    Category.AUDIO: frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"}),
    Category.ARCHIVES: frozenset({".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz"}),
}

_BY_EXTENSION = {
    ext: category
    for category, extensions in CATEGORY_EXTENSIONS.items()
    for ext in extensions
}


def file_extension(filename: str) -> str:
    """Lower-cased suffix including the dot, or an empty string."""
    return PurePath(filename).suffix.lower()


def categorize(filename: str) -> Category:
    return _BY_EXTENSION.get(file_extension(filename), Category.OTHER)


def list_categories() -> list[str]:
    """Category names as offered to clients, with the "all" pseudo-category first."""
    return ["all"] + [c.value for c in Category]
