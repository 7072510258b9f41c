"""
Token URI helpers
Validates token URIs and decodes JSON data URIs
"""

import json
import base64
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

JSON_BASE64_PREFIX = "data:application/json;base64,"
JSON_PLAIN_PREFIX = "data:application/json,"
SVG_BASE64_PREFIX = "data:image/svg+xml;base64,"

# Content-addressed storage, the CID or transaction ID sits in the netloc
STORAGE_SCHEMES = ("ipfs", "ar")


def is_json_data_uri(uri: str) -> bool:
    return uri.startswith((JSON_BASE64_PREFIX, JSON_PLAIN_PREFIX))


def parse_token_uri(uri: str) -> Optional[Dict]:
    """
    Validate a token URI
    
    Args:
        uri: Value returned by tokenURI()
    
    Returns:
        Decoded metadata for JSON data URIs, None for HTTP(S), IPFS, Arweave and other data URIs
    
    Raises:
        ValueError: empty, malformed or unsupported URI
    """
    if not uri:
        raise ValueError("Token URI is empty")
    
    if uri.startswith(JSON_BASE64_PREFIX):
        try:
            payload = base64.b64decode(uri[len(JSON_BASE64_PREFIX):], validate=True)
            return json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise ValueError(f"Malformed JSON data URI: {e}") from e
    
    if uri.startswith(JSON_PLAIN_PREFIX):
        try:
            return json.loads(unquote(uri[len(JSON_PLAIN_PREFIX):]))
        except ValueError as e:
            raise ValueError(f"Malformed JSON data URI: {e}") from e
    
    if uri.startswith("data:"):
        if "," not in uri:
            raise ValueError("Data URI has no payload")
        return None
    
    parsed = urlparse(uri)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return None
    
    if parsed.scheme in STORAGE_SCHEMES and parsed.netloc:
        return None
    
    raise ValueError(f"Unsupported token URI scheme: {uri[:32]}")


def decode_svg_image(image_uri: str) -> str:
    """Decode a base64 SVG image data URI back to markup"""
    if not image_uri.startswith(SVG_BASE64_PREFIX):
        raise ValueError("Image is not a base64 SVG data URI")
    
    return base64.b64decode(image_uri[len(SVG_BASE64_PREFIX):]).decode('utf-8')
