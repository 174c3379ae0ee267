"""스토리지 서비스 — 체크리스트 사진 S3 또는 로컬 파일 저장.

Storage Service — Stores checklist photos on S3 or on local disk.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
사진은 저장 경로와 업로드 시각 {"path", "uploaded_at"} 형태로 반환되며,
체크리스트 항목에 그대로 기록됩니다.
"""

import base64
import binascii
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.config import settings
from app.utils.exceptions import BadRequestError

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 server/uploads/
_SERVER_ROOT: Path = Path(__file__).resolve().parent.parent.parent

# data URL 접두사 — "data:image/jpeg;base64,..." prefix
_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,", re.IGNORECASE)

# 허용 이미지 유형 — Accepted image content types and their extensions
_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/gif": "gif",
}


class StorageService:
    """사진 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def uploads_dir(self) -> Path:
        return Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _SERVER_ROOT / "uploads"

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def decode_photo(self, payload: str) -> tuple[bytes, str, str]:
        """base64 사진 문자열을 디코딩합니다.

        Decode a base64 photo, optionally prefixed with a data URL header.

        Returns:
            tuple[bytes, str, str]: (이미지 바이트, content type, 확장자)

        Raises:
            BadRequestError: 디코딩 불가 또는 지원하지 않는 형식
        """
        content_type: str = "image/jpeg"
        match = _DATA_URL.match(payload)
        if match is not None:
            content_type = match.group("mime").lower()
            payload = payload[match.end():]

        extension: str | None = _EXTENSIONS.get(content_type)
        if extension is None:
            raise BadRequestError(f"지원하지 않는 사진 형식입니다 (Unsupported photo type: {content_type})")

        try:
            data: bytes = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise BadRequestError("사진 데이터를 디코딩할 수 없습니다 (Photo payload is not valid base64)")
        if not data:
            raise BadRequestError("빈 사진 데이터입니다 (Photo payload is empty)")

        return data, content_type, extension

    def _generate_key(self, extension: str, folder: str) -> str:
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{folder}/{date_prefix}/{uuid.uuid4().hex}.{extension}"

    def store_photo(self, payload: str, folder: str = "checklists") -> dict[str, Any]:
        """사진을 저장하고 {"path", "uploaded_at"} 기록을 반환합니다.

        Store one photo and return its storage record. The record is kept
        verbatim on the checklist item.
        """
        data, content_type, extension = self.decode_photo(payload)
        key: str = self._generate_key(extension, folder)

        if self.is_local:
            path = self.uploads_dir / key
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        else:
            self.client.put_object(
                Bucket=settings.AWS_S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=content_type,
            )

        return {"path": key, "uploaded_at": datetime.now(timezone.utc).isoformat()}

    def delete_photo(self, key: str) -> None:
        """저장된 사진을 삭제합니다 (Remove a stored photo; missing files are ignored)."""
        if self.is_local:
            (self.uploads_dir / key).unlink(missing_ok=True)
            return
        self.client.delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)

    def public_url(self, key: str) -> str:
        """저장 경로의 공개 URL (Public URL of a stored photo)."""
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"


storage_service: StorageService = StorageService()
