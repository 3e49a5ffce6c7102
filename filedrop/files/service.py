from typing import List
from urllib.parse import quote
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError

from filedrop.files.schemas import FileOut
from filedrop.files.storage import UploadDirectory
from filedrop.files.store import FileRecordStore
from filedrop.shared.errors import (
    NoFilesError, TooManyFilesError, RecordNotFoundError, StorageError, MetadataError,
)
from filedrop.shared.logging_config import logger

def _present(files: List[UploadFile] | None) -> List[UploadFile]:
    # browsers send an empty part when no file was chosen
    return [f for f in files or [] if f.filename]

async def upload_files(
    store: FileRecordStore,
    uploads: UploadDirectory,
    files: List[UploadFile] | None,
    max_files: int = 10,
) -> List[str]:
    """
    Write each part to the upload directory, then record the batch.
    Files already on disk are left in place if a later step fails.
    """
    files = _present(files)
    if not files:
        raise NoFilesError()
    if len(files) > max_files:
        raise TooManyFilesError(f"Too many files! At most {max_files} per upload.")

    names: List[str] = []
    try:
        for f in files:
            names.append(await uploads.save(f))
    except OSError as e:
        logger.error(f"Error writing upload to {uploads.root}: {e}", exc_info=True)
        raise StorageError("File upload failed!") from e

    try:
        indices = store.reserve_indices(len(names))
        store.insert_many(zip(names, indices))
    except SQLAlchemyError as e:
        logger.error(f"Error saving file data for {names}: {e}", exc_info=True)
        raise MetadataError("File upload failed!") from e

    logger.info(f"Recorded {len(names)} file(s) with indices {indices[0]}..{indices[-1]}")
    return names

def download_url(base_url: str, static_prefix: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}/{static_prefix.strip('/')}/{quote(filename)}"

def list_files(store: FileRecordStore, base_url: str, static_prefix: str) -> List[FileOut]:
    try:
        rows = store.find_all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching file data: {e}", exc_info=True)
        raise MetadataError("Failed to fetch files!") from e
    return [
        FileOut(
            id=r.id,
            filename=r.filename,
            index=r.index,
            upload_date=r.upload_date,
            url=download_url(base_url, static_prefix, r.filename),
        )
        for r in rows
    ]

def delete_file(store: FileRecordStore, uploads: UploadDirectory, file_id: str) -> None:
    """
    Remove the file from disk, then its record.
    The record is only removed once the file is gone.
    """
    try:
        rec = store.find_by_id(file_id)
    except SQLAlchemyError as e:
        logger.error(f"Error looking up file {file_id}: {e}", exc_info=True)
        raise MetadataError("Failed to delete file!") from e
    if rec is None:
        raise RecordNotFoundError()

    try:
        uploads.remove(rec.filename)
    except OSError as e:
        logger.error(f"Error deleting file {rec.filename}: {e}", exc_info=True)
        raise StorageError("Failed to delete file from server!") from e

    try:
        store.delete_by_id(file_id)
    except SQLAlchemyError as e:
        # file is gone but the record stays; listing will show a dead url
        logger.error(f"Error deleting record {file_id} after removing {rec.filename}: {e}", exc_info=True)
        raise MetadataError("Failed to delete file!") from e
    logger.info(f"Deleted file {file_id} ({rec.filename})")
