import re
from pathlib import Path

import fitz  # PyMuPDF

from talentmatch.config import ASSETS_DIR
from talentmatch.errors import NotFoundError


def resolve_resume_path(resume_ref: str, assets_dir: Path | None = None) -> Path:
    """Map a stored résumé reference to a file under the assets directory.

    References are stored as web paths such as `/users/42/resume/cv.pdf`.

    Raises:
        NotFoundError: If the file does not exist.
    """
    root = Path(assets_dir if assets_dir is not None else ASSETS_DIR)
    path = root / resume_ref.lstrip("/")
    if not path.is_file():
        raise NotFoundError(f"Resume file not found: {resume_ref}")
    return path


def extract_text_from_pdf(file_path: Path) -> str:
    """Extract text from a PDF file.

    Args:
        file_path: Path to the PDF file.

    Returns:
        Extracted text with normalized whitespace.

    Raises:
        FileNotFoundError: If the PDF file doesn't exist.
        ValueError: If the file is not a valid PDF.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {path}")

    if path.suffix.lower() != ".pdf":
        raise ValueError(f"File is not a PDF: {path}")

    text_parts = []

    try:
        with fitz.open(path) as doc:
            for page in doc:
                text_parts.append(page.get_text())
    except fitz.FileDataError as e:
        raise ValueError(f"File is not a valid PDF: {path}") from e

    raw_text = "\n".join(text_parts)
    return _clean_whitespace(raw_text)


def _clean_whitespace(text: str) -> str:
    """Normalize whitespace in extracted text."""
    text = re.sub(r"\r\n", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = text.strip()
    return text
