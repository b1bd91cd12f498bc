import hashlib

from app.analysis.models import ContentHash

HASH_ALGORITHM = "SHA-256"


def compute_content_hash(data: bytes) -> ContentHash:
    return ContentHash(algorithm=HASH_ALGORITHM, hex_digest=hashlib.sha256(data).hexdigest())
