"""File-browser backend over the document blob prefix.

Speaks the camelCase JSON protocol of the file-manager widget: every
operation answers with ``{"cwd", "files", "details", "error"}`` where the
entries describe files and folders below ``DOCUMENT_ROOT_PREFIX``.
"""
from __future__ import annotations

import fnmatch
import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Callable, Mapping, Sequence

import blob_storage
from errors import DocumentNotFoundError, DocumentStoreError

logger = logging.getLogger(__name__)

ROOT_FOLDER_NAME = "Files"
ARCHIVE_NAME = "files.zip"


class FileManagerError(Exception):
    """Error reported back to the widget inside the ``error`` field."""

    def __init__(self, code: str, message: str, *, file_exists: Sequence[str] | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.file_exists = list(file_exists or [])

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.file_exists:
            payload["fileExists"] = self.file_exists
        return payload


@dataclass(slots=True)
class FileManagerRequest:
    action: str
    path: str = "/"
    names: list[str] = field(default_factory=list)
    search_string: str = ""
    case_sensitive: bool = False
    show_hidden_items: bool = False
    target_path: str = "/"
    rename_files: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "FileManagerRequest":
        return cls(
            action=str(payload.get("action") or "").strip().lower(),
            path=str(payload.get("path") or "/"),
            names=[str(name) for name in payload.get("names") or []],
            search_string=str(payload.get("searchString") or ""),
            case_sensitive=bool(payload.get("caseSensitive")),
            show_hidden_items=bool(payload.get("showHiddenItems")),
            target_path=str(payload.get("targetPath") or "/"),
            rename_files=[str(name) for name in payload.get("renameFiles") or []],
        )


def normalize_path(path: str | None) -> str:
    """Return a widget path in canonical ``/a/b/`` form."""

    parts = [part for part in (path or "").replace("\\", "/").split("/") if part and part != "."]
    if parts and parts[0] == ROOT_FOLDER_NAME:
        parts = parts[1:]
    if any(part == ".." for part in parts):
        raise FileManagerError("400", "Relative path segments are not allowed")
    return "/" + "".join(f"{part}/" for part in parts)


def folder_prefix(path: str) -> str:
    return blob_storage.blob_path(normalize_path(path).lstrip("/"))


def _relative_name(object_name: str) -> str:
    return object_name[len(blob_storage.DOCUMENT_ROOT_PREFIX):]


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _file_entry(info: blob_storage.BlobInfo, filter_path: str) -> dict[str, Any]:
    name = PurePosixPath(info.object_name).name
    return {
        "name": name,
        "isFile": True,
        "size": info.size or 0,
        "dateModified": _iso(info.updated),
        "type": PurePosixPath(name).suffix,
        "filterPath": filter_path,
        "hasChild": False,
    }


def _folder_entry(name: str, filter_path: str, *, has_child: bool = True) -> dict[str, Any]:
    return {
        "name": name,
        "isFile": False,
        "size": 0,
        "dateModified": None,
        "type": "",
        "filterPath": filter_path,
        "hasChild": has_child,
    }


def _visible(name: str, show_hidden: bool) -> bool:
    return show_hidden or not name.startswith(".")


def _cwd_entry(path: str, has_child: bool) -> dict[str, Any]:
    parts = [part for part in path.split("/") if part]
    if not parts:
        return _folder_entry(ROOT_FOLDER_NAME, "", has_child=has_child)
    parent = "/" + "".join(f"{part}/" for part in parts[:-1])
    return _folder_entry(parts[-1], parent, has_child=has_child)


def read(request: FileManagerRequest) -> dict[str, Any]:
    path = normalize_path(request.path)
    prefix = folder_prefix(path)
    listing = blob_storage.list_blobs(prefix)

    files: list[dict[str, Any]] = []
    for sub_prefix in listing.prefixes:
        name = sub_prefix[len(prefix):].strip("/")
        if name and _visible(name, request.show_hidden_items):
            files.append(_folder_entry(name, path))
    for info in listing.blobs:
        if info.object_name == prefix:
            # folder placeholder object
            continue
        entry = _file_entry(info, path)
        if _visible(entry["name"], request.show_hidden_items):
            files.append(entry)

    return {"cwd": _cwd_entry(path, bool(files)), "files": files, "details": None, "error": None}


def _objects_for(path: str, name: str) -> list[str]:
    """Object names addressed by ``name`` in ``path``: the file itself or a folder's contents."""

    base = folder_prefix(path)
    object_name = f"{base}{name}"
    if blob_storage.blob_exists(object_name):
        return [object_name]
    listing = blob_storage.list_blobs(f"{object_name}/", delimiter=None)
    if not listing.blobs:
        raise FileManagerError("404", f"File or folder '{name}' not found in {path}")
    return [info.object_name for info in listing.blobs]


def delete(request: FileManagerRequest) -> dict[str, Any]:
    path = normalize_path(request.path)
    base = folder_prefix(path)
    removed: list[dict[str, Any]] = []
    for name in request.names:
        objects = _objects_for(path, name)
        for object_name in objects:
            blob_storage.delete_blob(object_name)
        entry = _folder_entry(name, path, has_child=False)
        if objects == [f"{base}{name}"]:
            entry.update(isFile=True, type=PurePosixPath(name).suffix)
        removed.append(entry)
        logger.info("Deleted %s from %s (%d objects)", name, path, len(objects))
    return {"cwd": None, "files": removed, "details": None, "error": None}


def details(request: FileManagerRequest) -> dict[str, Any]:
    path = normalize_path(request.path)
    names = request.names or []
    if not names:
        # details of the current folder itself
        listing = blob_storage.list_blobs(folder_prefix(path), delimiter=None)
        size = sum(info.size or 0 for info in listing.blobs)
        cwd = _cwd_entry(path, bool(listing.blobs))
        return {
            "cwd": None,
            "files": None,
            "details": {
                "name": cwd["name"],
                "location": f"{ROOT_FOLDER_NAME}{path}",
                "size": size,
                "modified": None,
                "isFile": False,
                "multipleFiles": False,
            },
            "error": None,
        }

    total = 0
    modified: datetime | None = None
    is_file = False
    for name in names:
        objects = _objects_for(path, name)
        is_file = len(names) == 1 and objects == [f"{folder_prefix(path)}{name}"]
        for object_name in objects:
            info = blob_storage.get_blob_info(object_name)
            total += info.size or 0
            if info.updated and (modified is None or info.updated > modified):
                modified = info.updated

    return {
        "cwd": None,
        "files": None,
        "details": {
            "name": ", ".join(names),
            "location": f"{ROOT_FOLDER_NAME}{path}{names[0] if len(names) == 1 else ''}",
            "size": total,
            "modified": _iso(modified),
            "isFile": is_file,
            "multipleFiles": len(names) > 1,
        },
        "error": None,
    }


def search(request: FileManagerRequest) -> dict[str, Any]:
    path = normalize_path(request.path)
    pattern = request.search_string or "*"
    if "*" not in pattern and "?" not in pattern:
        pattern = f"*{pattern}*"
    if not request.case_sensitive:
        pattern = pattern.lower()

    listing = blob_storage.list_blobs(folder_prefix(path), delimiter=None)
    files: list[dict[str, Any]] = []
    for info in listing.blobs:
        relative = _relative_name(info.object_name)
        if not relative or relative.endswith("/"):
            continue
        name = PurePosixPath(relative).name
        candidate = name if request.case_sensitive else name.lower()
        if not _visible(name, request.show_hidden_items) or not fnmatch.fnmatchcase(candidate, pattern):
            continue
        filter_path = "/" + "".join(f"{part}/" for part in PurePosixPath(relative).parts[:-1])
        files.append(_file_entry(info, filter_path))

    return {"cwd": _cwd_entry(path, bool(files)), "files": files, "details": None, "error": None}


def _renamed(name: str, taken: set[str]) -> str:
    stem, suffix = PurePosixPath(name).stem, PurePosixPath(name).suffix
    index = 1
    while True:
        candidate = f"{stem}({index}){suffix}"
        if candidate not in taken:
            return candidate
        index += 1


def copy(request: FileManagerRequest) -> dict[str, Any]:
    source_path = normalize_path(request.path)
    target_path = normalize_path(request.target_path)
    source_prefix = folder_prefix(source_path)
    target_prefix = folder_prefix(target_path)

    target_listing = blob_storage.list_blobs(target_prefix)
    existing = {PurePosixPath(info.object_name).name for info in target_listing.blobs}
    existing.update(prefix[len(target_prefix):].strip("/") for prefix in target_listing.prefixes)
    conflicts = [
        name for name in request.names if name in existing and name not in request.rename_files
    ]
    if conflicts:
        raise FileManagerError("400", "File Already Exists", file_exists=conflicts)

    copied: list[dict[str, Any]] = []
    for name in request.names:
        target_name = _renamed(name, existing) if name in existing else name
        existing.add(target_name)
        for object_name in _objects_for(source_path, name):
            relative = object_name[len(source_prefix):]
            destination = f"{target_prefix}{target_name}{relative[len(name):]}"
            blob_storage.copy_blob(object_name, destination)
        copied.append(_folder_entry(target_name, target_path, has_child=False))
        logger.info("Copied %s%s to %s%s", source_path, name, target_path, target_name)

    return {"cwd": None, "files": copied, "details": None, "error": None}


_OPERATIONS: dict[str, Callable[[FileManagerRequest], dict[str, Any]]] = {
    "read": read,
    "delete": delete,
    "details": details,
    "search": search,
    "copy": copy,
}

SUPPORTED_ACTIONS = tuple(_OPERATIONS)


def perform_operation(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Dispatch a widget request; errors come back inside the ``error`` field."""

    request = FileManagerRequest.from_mapping(payload)
    handler = _OPERATIONS.get(request.action)
    if handler is None:
        raise FileManagerError("400", f"Unsupported file operation '{request.action}'")
    try:
        return handler(request)
    except FileManagerError as exc:
        return {"cwd": None, "files": None, "details": None, "error": exc.as_payload()}
    except DocumentNotFoundError as exc:
        return {"cwd": None, "files": None, "details": None, "error": {"code": "404", "message": str(exc)}}
    except DocumentStoreError as exc:
        logger.error("File operation %s failed: %s", request.action, exc)
        return {"cwd": None, "files": None, "details": None, "error": {"code": "500", "message": str(exc)}}


@dataclass(slots=True)
class DownloadPayload:
    filename: str
    data: bytes
    media_type: str


def download(payload: Mapping[str, Any]) -> DownloadPayload:
    """Return a single file's bytes, or a zip archive for folders and multiple names."""

    request = FileManagerRequest.from_mapping({"action": "download", **payload})
    path = normalize_path(request.path)
    if not request.names:
        raise FileManagerError("400", "No files selected for download")

    base = folder_prefix(path)
    collected: list[str] = []
    for name in request.names:
        collected.extend(_objects_for(path, name))

    if len(request.names) == 1 and collected == [f"{base}{request.names[0]}"]:
        return DownloadPayload(
            filename=request.names[0],
            data=blob_storage.download_blob(collected[0]),
            media_type="application/octet-stream",
        )

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for object_name in collected:
            if object_name.endswith("/"):
                continue
            archive.writestr(object_name[len(base):], blob_storage.download_blob(object_name))
    return DownloadPayload(filename=ARCHIVE_NAME, data=buffer.getvalue(), media_type="application/zip")


__all__ = [
    "DownloadPayload",
    "FileManagerError",
    "FileManagerRequest",
    "SUPPORTED_ACTIONS",
    "download",
    "normalize_path",
    "perform_operation",
]
