import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.config import settings
from taskhub.core.exceptions import AttachmentUploadError
from taskhub.modules.attachments.schemas import AttachmentUpload, AttachmentResponse

logger = logging.getLogger(__name__)


def build_storage_key(task_id: str, file_name: str) -> str:
    """Randomized object key scoped to the parent task: {task_id}/{random}.{ext}"""
    ext = file_name.split(".")[-1]
    return f"{task_id}/{uuid.uuid4().hex[:13]}.{ext}"


class AttachmentService:
    def __init__(self, supabase: Client, bucket: Optional[str] = None, max_workers: Optional[int] = None):
        self.supabase = supabase
        self.bucket = bucket or settings.attachments_bucket
        self.max_workers = max_workers or settings.upload_max_workers

    def list_attachments(self, task_id: str) -> List[AttachmentResponse]:
        """Attachments of a task, newest first"""
        try:
            result = self.supabase.table("attachments")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("created_at", desc=True)\
                .execute()
            return [AttachmentResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching attachments for task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load attachments")

    def upload_one(self, task_id: str, user_id: str, upload: AttachmentUpload) -> AttachmentResponse:
        """Upload bytes, resolve the public URL, then insert the metadata row."""
        key = build_storage_key(task_id, upload.file_name)
        bucket = self.supabase.storage.from_(self.bucket)
        bucket.upload(key, upload.content, {"content-type": upload.content_type})
        file_url = bucket.get_public_url(key)

        result = self.supabase.table("attachments").insert({
            "task_id": task_id,
            "user_id": user_id,
            "file_name": upload.file_name,
            "file_type": upload.content_type,
            "file_url": file_url,
            "file_size": upload.size,
        }).execute()
        if not result.data:
            raise RuntimeError(f"No metadata row returned for {upload.file_name}")
        return AttachmentResponse(**result.data[0])

    def upload_attachments(self, task_id: str, user_id: str, uploads: List[AttachmentUpload]) -> List[AttachmentResponse]:
        """Upload files concurrently.

        Every file is attempted. If any failed, AttachmentUploadError is raised
        after all have finished; stored siblings and their rows are kept.
        """
        if not uploads:
            return []

        with ThreadPoolExecutor(max_workers=min(len(uploads), self.max_workers)) as executor:
            futures = [
                executor.submit(self.upload_one, task_id, user_id, upload)
                for upload in uploads
            ]

        uploaded: List[AttachmentResponse] = []
        failed: List[str] = []
        for upload, future in zip(uploads, futures):
            try:
                uploaded.append(future.result())
            except Exception as e:
                logger.error(f"Error uploading {upload.file_name} to task {task_id}: {e}")
                failed.append(upload.file_name)

        if failed:
            raise AttachmentUploadError(failed, uploaded)
        logger.info(f"Uploaded {len(uploaded)} attachment(s) to task {task_id}")
        return uploaded

    def delete_attachment(self, attachment_id: str) -> bool:
        """Delete an attachment row"""
        try:
            result = self.supabase.table("attachments")\
                .delete()\
                .eq("id", attachment_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting attachment {attachment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete attachment")
