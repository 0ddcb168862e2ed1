from fastapi import APIRouter, Depends, UploadFile, File
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.attachments.schemas import AttachmentUpload, AttachmentResponse
from taskhub.modules.attachments.service import AttachmentService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client
from typing import List

router = APIRouter(tags=["attachments"])


def get_attachment_service(supabase: Client = Depends(get_user_supabase)) -> AttachmentService:
    return AttachmentService(supabase)


async def read_uploads(files: List[UploadFile]) -> List[AttachmentUpload]:
    return [
        AttachmentUpload(
            file_name=file.filename or "file",
            content_type=file.content_type or "application/octet-stream",
            content=await file.read(),
        )
        for file in files
    ]


@router.get("/tasks/{task_id}/attachments", response_model=List[AttachmentResponse])
async def list_attachments(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service)
):
    """List attachments of a task"""
    return service.list_attachments(task_id)


@router.post("/tasks/{task_id}/attachments", response_model=List[AttachmentResponse], status_code=201)
async def upload_attachments(
    task_id: str,
    files: List[UploadFile] = File(...),
    current_user: Profile = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service)
):
    """Upload one or more files to a task"""
    uploads = await read_uploads(files)
    return service.upload_attachments(task_id, current_user.id, uploads)


@router.delete("/attachments/{attachment_id}", status_code=204)
async def delete_attachment(
    attachment_id: str,
    current_user: Profile = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service)
):
    """Delete an attachment"""
    service.delete_attachment(attachment_id)
    return None
