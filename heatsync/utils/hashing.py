import hashlib


def compute_checksum(pdf_bytes: bytes) -> str:
    """Return the 32-character lowercase hex MD5 digest of raw PDF bytes.

    The digest is the PDF cache key, so identical bytes always map to the
    same cached file and a single changed byte never does.
    """
    return hashlib.md5(pdf_bytes).hexdigest()
