"""
Image upload to S3-compatible object storage.

Images are re-encoded to PNG with Pillow, then PUT through a SigV4
query-string presigned URL (path-style addressing, UNSIGNED-PAYLOAD). Objects are
written public-read; the returned URL is served straight from the bucket.
"""

import hashlib
import hmac
import io
import logging
import uuid
from datetime import datetime, timezone
from urllib.parse import quote, urlparse

import requests
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

PRESIGN_EXPIRES_SECONDS = 300
UPLOAD_TIMEOUT_SECONDS = 30
ALGORITHM = "AWS4-HMAC-SHA256"
OBJECT_ACL = "public-read"


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def compress_image(data: bytes) -> bytes:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                img = img.convert("RGBA")
            out = io.BytesIO()
            img.save(out, format="PNG", optimize=True)
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("Uploaded file is not a valid image") from e
    return out.getvalue()


def presign_put_url(object_key: str, expires_seconds: int = PRESIGN_EXPIRES_SECONDS, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    amz_date = now.strftime("%Y%m%dT%H%M%SZ")
    datestamp = now.strftime("%Y%m%d")

    endpoint = urlparse(settings.S3_STORAGE_ENDPOINT)
    host = endpoint.netloc
    canonical_uri = quote(f"{endpoint.path.rstrip('/')}/{settings.S3_STORAGE_BUCKET_NAME}/{object_key}", safe="/-_.~")
    credential_scope = f"{datestamp}/{settings.S3_STORAGE_REGION}/s3/aws4_request"

    params = {
        "X-Amz-Algorithm": ALGORITHM,
        "X-Amz-Credential": f"{settings.S3_STORAGE_ACCESS_KEY_ID}/{credential_scope}",
        "X-Amz-Date": amz_date,
        "X-Amz-Expires": str(expires_seconds),
        "X-Amz-SignedHeaders": "host;x-amz-acl",
    }
    canonical_querystring = "&".join(
        f"{quote(k, safe='-_.~')}={quote(params[k], safe='-_.~')}" for k in sorted(params)
    )
    canonical_request = "\n".join([
        "PUT",
        canonical_uri,
        canonical_querystring,
        f"host:{host}\nx-amz-acl:{OBJECT_ACL}\n",
        "host;x-amz-acl",
        "UNSIGNED-PAYLOAD",
    ])
    string_to_sign = "\n".join([
        ALGORITHM,
        amz_date,
        credential_scope,
        hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
    ])

    k_date = _hmac(("AWS4" + settings.S3_STORAGE_SECRET_ACCESS_KEY).encode("utf-8"), datestamp)
    k_region = _hmac(k_date, settings.S3_STORAGE_REGION)
    k_service = _hmac(k_region, "s3")
    k_signing = _hmac(k_service, "aws4_request")
    signature = hmac.new(k_signing, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    return f"{endpoint.scheme}://{host}{canonical_uri}?{canonical_querystring}&X-Amz-Signature={signature}"


def upload_image_file(data: bytes, folder: str) -> str:
    """Compress and upload an image, returning its public URL."""
    png = compress_image(data)
    object_key = f"{folder}/{uuid.uuid4()}.png"
    url = presign_put_url(object_key)
    try:
        r = requests.put(url, data=png, headers={"Content-Type": "image/png", "x-amz-acl": OBJECT_ACL},
                         timeout=UPLOAD_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        logger.error("S3 upload of %s failed: %s", object_key, e)
        raise ExternalServiceError("File upload failed.") from e

    if r.status_code == 413 or "EntityTooLarge" in (r.text or ""):
        logger.warning("S3 upload of %s rejected as too large", object_key)
        raise ExternalServiceError("File is too large", status_code=400)
    if r.status_code >= 300:
        logger.error("S3 upload of %s failed: status=%s body=%s", object_key, r.status_code, (r.text or "")[:500])
        raise ExternalServiceError("File upload failed.")

    logger.info("uploaded %s", object_key)
    return f"{settings.S3_STORAGE_BUCKET_ENDPOINT}/{object_key}"
