"""Plain-text helpers for source material fed to outline synthesis."""


def normalize_text(text: str) -> str:
    """Collapse runs of blank lines to at most two and trim the result."""
    normalized: list[str] = []
    blank_count = 0
    for line in text.splitlines():
        if line.strip() == "":
            blank_count += 1
            if blank_count <= 2:
                normalized.append("")
        else:
            blank_count = 0
            normalized.append(line.rstrip())

    return "\n".join(normalized).strip()


def chunk_text(text: str, max_chunk_size: int = 3000) -> list[str]:
    """Split text into chunks of at most ``max_chunk_size`` on paragraph breaks.

    A single paragraph longer than the limit becomes its own chunk.
    """
    chunks: list[str] = []
    current = ""

    for paragraph in text.split("\n\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if len(current) + len(paragraph) <= max_chunk_size:
            current += paragraph + "\n\n"
        else:
            if current:
                chunks.append(current.strip())
            current = paragraph + "\n\n"

    if current:
        chunks.append(current.strip())

    return chunks if chunks else [text]


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]
