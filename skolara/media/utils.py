import secrets
import time
from pathlib import Path
from typing import Optional
from PIL import Image
from skolara.config.media_config import media_settings


class FileTooLarge(ValueError):
    pass


class FileUpload:
    MAX_UPLOAD_SIZE = media_settings.MAX_UPLOAD_SIZE
    TMP_ROOT = media_settings.MEDIA_TMP_ROOT
    ALLOWED_TOP_LEVEL = ("image",)      # quick check on the Content-Type header
    CHUNK_SIZE = 1024 * 1024            # 1MB chunk reads

    def is_allowed_content_type(self, content_type) -> bool:
        return bool(content_type) and content_type.split("/")[0] in FileUpload.ALLOWED_TOP_LEVEL

    def make_tmp_path(self, bucket: str) -> Path:
        tmp_dir = Path(FileUpload.TMP_ROOT) / bucket
        tmp_dir.mkdir(parents=True, exist_ok=True)
        return tmp_dir / f"upload_{secrets.token_hex(8)}.tmp"

    def build_object_name(self) -> str:
        # <timestamp>-<random>, unique enough within a bucket
        return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"

    def _stream_save_to_disk_sync(self, src_file, tmp_path: Path, max_size: Optional[int] = None) -> int:
        max_size = max_size or FileUpload.MAX_UPLOAD_SIZE
        tmp_path.parent.mkdir(parents=True, exist_ok=True)
        total = 0
        with open(tmp_path, "wb") as w:
            while True:
                chunk = src_file.read(FileUpload.CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if max_size and total > max_size:
                    break
                w.write(chunk)

        if max_size and total > max_size:
            tmp_path.unlink(missing_ok=True)
            raise FileTooLarge(f"file larger than {max_size} bytes")
        return total

    def _verify_image_sync(self, tmp_path: Path) -> str:
        """Raises PIL.UnidentifiedImageError for non images; returns the lowercase format."""
        with Image.open(tmp_path) as img:
            img.verify()
            fmt = (img.format or "").lower()
        return fmt or "jpg"


file_upload = FileUpload()
