from typing import List
from fastapi import APIRouter, UploadFile, File as Upload, Depends, Request
from sqlalchemy.orm import Session

from filedrop.shared.db import get_db
from filedrop.files.schemas import FileOut, UploadOut, MessageOut
from filedrop.files.service import upload_files, list_files, delete_file
from filedrop.files.storage import UploadDirectory
from filedrop.files.store import FileRecordStore

router = APIRouter(tags=["Files"])

def get_store(db: Session = Depends(get_db)) -> FileRecordStore:
    return FileRecordStore(db)

def get_uploads(request: Request) -> UploadDirectory:
    return request.app.state.uploads

@router.post("/upload", response_model=UploadOut)
async def upload(
    request: Request,
    files: List[UploadFile] | None = Upload(None, alias="files[]"),
    store: FileRecordStore = Depends(get_store),
    uploads: UploadDirectory = Depends(get_uploads),
):
    max_files = request.app.state.settings.MAX_FILES_PER_REQUEST
    names = await upload_files(store, uploads, files, max_files=max_files)
    return {"message": "Files uploaded successfully!", "files": names}

@router.get("/files", response_model=List[FileOut])
def files_index(request: Request, store: FileRecordStore = Depends(get_store)):
    prefix = request.app.state.settings.STATIC_PREFIX
    return list_files(store, str(request.base_url), prefix)

@router.delete("/files/{file_id}", response_model=MessageOut)
def files_delete(
    file_id: str,
    store: FileRecordStore = Depends(get_store),
    uploads: UploadDirectory = Depends(get_uploads),
):
    delete_file(store, uploads, file_id)
    return {"message": "File deleted successfully!"}
