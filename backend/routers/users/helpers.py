from fastapi import HTTPException, status, UploadFile
from config import get_supabase_storage, get_supabase_admin_client, SUPABASE_STORAGE_BUCKET
import logging
import uuid
import os

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]
MAX_IMAGE_SIZE = 5 * 1024 * 1024


class ImageWriter:
    """Stores images in Supabase Storage, one sub folder per image kind"""

    def __init__(self, bucket_name: str = SUPABASE_STORAGE_BUCKET):
        self.bucket_name = bucket_name
        self._storage = None

    @property
    def storage(self):
        if self._storage is None:
            self._storage = get_supabase_storage()
        return self._storage

    async def upload_image(self, folder: str, file: UploadFile) -> str:
        """
        Upload an image and return its public URL.
        Invalid images raise a 400, storage errors propagate unchanged.
        """
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File type {file.content_type} not allowed"
            )

        file_content = await file.read()
        if len(file_content) > MAX_IMAGE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="File size must be less than 5MB"
            )

        file_extension = os.path.splitext(file.filename)[1] if file.filename else '.jpg'
        unique_filename = f"{folder}/{uuid.uuid4()}{file_extension}"

        self.storage.from_(self.bucket_name).upload(
            path=unique_filename,
            file=file_content,
            file_options={"content-type": file.content_type}
        )

        public_url = get_supabase_admin_client().storage.from_(self.bucket_name).get_public_url(unique_filename)
        logger.info(f"Stored image {unique_filename}")

        return public_url

    def delete_image(self, folder: str, image_url: str) -> bool:
        """
        Delete an image previously returned by upload_image
        """
        try:
            marker = f"/{self.bucket_name}/{folder}/"
            if marker not in image_url:
                return False

            file_name = image_url.split(marker)[1].split("?")[0]
            self.storage.from_(self.bucket_name).remove([f"{folder}/{file_name}"])
            return True

        except Exception as e:
            logger.error(f"Error deleting image {image_url}: {str(e)}")
            return False


def get_image_writer() -> ImageWriter:
    return ImageWriter()
