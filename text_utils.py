from typing import Any, Optional


def sanitize(text: Any) -> str:
    """
    Normalize text for PDF output, stripping unsupported characters and
    normalizing common punctuation.
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)
    return (
        text.replace("–", "-")
        .replace("—", "-")
        .replace("“", "\"")
        .replace("”", "\"")
        .replace("’", "'")
        .encode("latin-1", errors="ignore")
        .decode("latin-1")
    )


def make_filename_safe(text: str) -> str:
    """
    Remove characters that are illegal/annoying in filenames and normalize spaces.
    """
    txt = (text or "").strip()
    if not txt:
        return ""
    bad_chars = '<>:"/\\|?*;'
    for ch in bad_chars:
        txt = txt.replace(ch, " ")
    # collapse multiple spaces
    txt = " ".join(txt.split())
    return txt


def report_file_name(project_code: Optional[str]) -> str:
    code = make_filename_safe(sanitize(project_code))
    return f"site-visit-{code}.pdf" if code else "site-visit.pdf"
