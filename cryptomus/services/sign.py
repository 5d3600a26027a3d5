import base64
import hashlib


def sign_request(api_key: str, payload: bytes) -> str:
    """
    Compute the Cryptomus signature of a request or webhook body.

    The vendor signs md5(base64(body) + api_key) and sends the lowercase hex
    digest. MD5 is dictated by their protocol and is kept only for
    interoperability.
    """
    data = base64.b64encode(payload).decode("ascii")
    return hashlib.md5((data + api_key).encode("utf-8")).hexdigest()
