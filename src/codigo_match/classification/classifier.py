"""Split pasted text into ICD-10, CPT and invalid code buckets."""
import re

from src.codigo_match.models.schemas import ClassificationResult, CodeType

# ICD-10-CM: letter, two digits, optional decimal part (e.g., M79.3, A01.23B)
ICD_PATTERN = re.compile(r"[A-Z]\d{2}(\.\d{1,4}[A-Z]?)?", re.ASCII)
# CPT: exactly five digits (e.g., 99213, 00100)
CPT_PATTERN = re.compile(r"\d{5}", re.ASCII)

# Space, tab, CR, LF, FF, VT, comma, semicolon
DELIMITER_PATTERN = re.compile(r"[\s,;]+", re.ASCII)


def tokenize(text: str) -> list[str]:
    """
    Split text on ASCII whitespace, commas and semicolons, dropping empty
    pieces. Pieces hold no delimiter, so they come out already trimmed.
    """
    return [piece for piece in DELIMITER_PATTERN.split(text) if piece]


def detect_code_type(token: str) -> CodeType:
    """Classify one token. ICD is tested before CPT."""
    code = token.upper()
    if ICD_PATTERN.fullmatch(code):
        return CodeType.ICD
    if CPT_PATTERN.fullmatch(code):
        return CodeType.CPT
    return CodeType.INVALID


def classify(text: str) -> ClassificationResult:
    """
    Tokenize, normalize and classify free text.

    Every token lands in exactly one bucket; duplicates collapse onto their
    first occurrence. Never raises: text without tokens gives empty buckets.
    """
    buckets: dict[CodeType, dict[str, None]] = {t: {} for t in CodeType}
    for token in tokenize(text):
        code = token.upper()
        buckets[detect_code_type(code)].setdefault(code, None)

    return ClassificationResult(
        icd=list(buckets[CodeType.ICD]),
        cpt=list(buckets[CodeType.CPT]),
        invalid=list(buckets[CodeType.INVALID]),
    )
