"""HTTP storage proxy for the document editor and the file browser."""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, Query, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

import blob_storage
from errors import DocumentNotFoundError, DocumentStoreError
from services import document_service, file_manager_service
from services.file_manager_service import FileManagerError

load_dotenv()

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

CORS_ALLOW_ORIGINS = [
    origin.strip() for origin in (os.getenv("CORS_ALLOW_ORIGINS") or "*").split(",") if origin.strip()
]


class ExistsBody(BaseModel):
    fileName: Optional[str] = None


class FetchBody(BaseModel):
    documentName: Optional[str] = None


class ClipboardBody(BaseModel):
    content: Optional[str] = None
    type: Optional[str] = None


app = FastAPI(title="Document storage proxy", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def _content_disposition(filename: str) -> str:
    safe = filename.replace('"', "")
    return f'attachment; filename="{safe}"'


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok", "bucket": blob_storage.GCS_BUCKET_NAME or None}


@app.post("/documents/exists")
def documents_exists(body: ExistsBody) -> JSONResponse:
    file_name = (body.fileName or "").strip()
    if not file_name:
        return _error("fileName not provided", status.HTTP_400_BAD_REQUEST)
    exists = document_service.document_exists(file_name)
    return JSONResponse(content={"exists": exists})


@app.post("/documents/fetch")
def documents_fetch(body: FetchBody) -> JSONResponse:
    document_name = (body.documentName or "").strip()
    if not document_name:
        return _error("documentName not provided", status.HTTP_400_BAD_REQUEST)
    try:
        document = document_service.fetch_document(document_name)
    except DocumentNotFoundError:
        return _error(f"Document '{document_name}' not found", status.HTTP_404_NOT_FOUND)
    except DocumentStoreError as exc:
        logger.error("Document retrieval failed for %s: %s", document_name, exc)
        return _error("Document retrieval failed", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(content=document)


@app.post("/documents/persist")
async def documents_persist(
    documentName: str = Form(""),
    data: Optional[UploadFile] = File(None),
) -> JSONResponse:
    document_name = documentName.strip()
    if not document_name:
        return _error("documentName not provided", status.HTTP_400_BAD_REQUEST)
    content = await data.read() if data is not None else b""
    try:
        result = document_service.persist_document(document_name, content)
    except DocumentStoreError as exc:
        logger.error("File upload failed for %s: %s", document_name, exc)
        return _error("Document upload failed", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(content={"documentName": result.document_name, "size": result.size})


@app.get("/documents/download")
def documents_download(documentName: str = Query("")) -> Response:
    document_name = documentName.strip()
    if not document_name:
        return _error("documentName not provided", status.HTTP_400_BAD_REQUEST)
    try:
        downloaded = document_service.download_document(document_name)
    except DocumentNotFoundError:
        return _error(f"Document '{document_name}' not found", status.HTTP_404_NOT_FOUND)
    except DocumentStoreError as exc:
        logger.error("Download failed for %s: %s", document_name, exc)
        return _error("Document download failed", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(
        content=downloaded.data,
        media_type=downloaded.media_type,
        headers={"Content-Disposition": _content_disposition(downloaded.filename)},
    )


@app.post("/documents/clipboard")
def documents_clipboard(body: ClipboardBody) -> JSONResponse:
    return JSONResponse(content=document_service.convert_clipboard(body.content, body.type))


@app.post("/filemanager/operations")
async def file_operations(request: Request) -> JSONResponse:
    try:
        payload = await request.json()
    except ValueError:
        return _error("Request body must be JSON", status.HTTP_400_BAD_REQUEST)
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)
    try:
        result = file_manager_service.perform_operation(payload)
    except FileManagerError as exc:
        return JSONResponse(content={"error": exc.as_payload()}, status_code=status.HTTP_400_BAD_REQUEST)
    return JSONResponse(content=result)


@app.post("/filemanager/download")
def file_download(downloadInput: str = Form("")) -> Response:
    if not downloadInput:
        return _error("downloadInput not provided", status.HTTP_400_BAD_REQUEST)
    try:
        payload = json.loads(downloadInput)
    except ValueError:
        return _error("downloadInput must be JSON", status.HTTP_400_BAD_REQUEST)
    try:
        result = file_manager_service.download(payload)
    except FileManagerError as exc:
        status_code = status.HTTP_404_NOT_FOUND if exc.code == "404" else status.HTTP_400_BAD_REQUEST
        return JSONResponse(content={"error": exc.as_payload()}, status_code=status_code)
    except DocumentNotFoundError as exc:
        return _error(str(exc), status.HTTP_404_NOT_FOUND)
    except DocumentStoreError as exc:
        logger.error("Download operation failed: %s", exc)
        return _error("Download operation failed", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(
        content=result.data,
        media_type=result.media_type,
        headers={"Content-Disposition": _content_disposition(result.filename)},
    )


def main() -> None:
    import uvicorn

    uvicorn.run(
        "api:app",
        host=os.getenv("DOCUMENT_API_HOST", "0.0.0.0"),
        port=int(os.getenv("DOCUMENT_API_PORT", "62869")),
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()


__all__ = ["app", "main"]
