"""Record store failure taxonomy.

Every backend failure is converted exactly once, at the repository boundary,
into one of the classes below. Each carries a Vietnamese message that can be
shown to the person using the form or the records list as-is.
"""

from __future__ import annotations

from enum import Enum

from .db.store import FAILED_PRECONDITION, NOT_FOUND, PERMISSION_DENIED, UNAVAILABLE, StoreError


class Operation(str, Enum):
    ADD = "add"
    LIST = "list"
    DELETE = "delete"
    WATCH = "watch"


class RecordStoreError(Exception):
    """Base class for classified store failures."""

    kind = "unclassified"

    def __init__(self, message: str, *, code: str | None = None, operation: Operation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.operation = operation


class PermissionDenied(RecordStoreError):
    kind = "permission-denied"


class Unavailable(RecordStoreError):
    kind = "unavailable"


class NotFound(RecordStoreError):
    kind = "not-found"


class IndexMissing(RecordStoreError):
    kind = "index-missing"


class Unclassified(RecordStoreError):
    kind = "unclassified"


_UNAVAILABLE_MESSAGE = "Cơ sở dữ liệu không khả dụng. Vui lòng kiểm tra kết nối internet."

_PERMISSION_MESSAGES = {
    Operation.ADD: "Không có quyền thêm dữ liệu. Vui lòng kiểm tra quyền truy cập cơ sở dữ liệu.",
    Operation.LIST: "Không có quyền truy cập dữ liệu. Vui lòng kiểm tra quyền truy cập cơ sở dữ liệu.",
    Operation.DELETE: "Không có quyền xóa dữ liệu. Vui lòng kiểm tra quyền truy cập cơ sở dữ liệu.",
    Operation.WATCH: "Không có quyền truy cập dữ liệu. Vui lòng kiểm tra quyền truy cập cơ sở dữ liệu.",
}

_GENERIC_MESSAGES = {
    Operation.ADD: "Có lỗi xảy ra khi thêm bản ghi. Vui lòng thử lại.",
    Operation.LIST: "Có lỗi xảy ra khi tải dữ liệu. Vui lòng thử lại.",
    Operation.DELETE: "Có lỗi xảy ra khi xóa bản ghi. Vui lòng thử lại.",
    Operation.WATCH: "Có lỗi xảy ra khi tải dữ liệu. Vui lòng thử lại.",
}

_NOT_FOUND_MESSAGES = {
    Operation.DELETE: "Bản ghi không tồn tại.",
}

_INDEX_MISSING_MESSAGE = "Thiếu chỉ mục sắp xếp theo thời gian tạo. Vui lòng tạo chỉ mục cho trường createdAt."


# Operations that can meaningfully report a missing document or a missing index.
_NOT_FOUND_OPERATIONS = {Operation.DELETE, Operation.LIST, Operation.WATCH}
_INDEX_OPERATIONS = {Operation.LIST, Operation.WATCH}


def classify_store_error(error: StoreError, operation: Operation) -> RecordStoreError:
    """Map a store failure code onto the taxonomy for the given operation."""
    code = error.code
    if code == PERMISSION_DENIED:
        return PermissionDenied(_PERMISSION_MESSAGES[operation], code=code, operation=operation)
    if code == UNAVAILABLE:
        return Unavailable(_UNAVAILABLE_MESSAGE, code=code, operation=operation)
    if code == NOT_FOUND and operation in _NOT_FOUND_OPERATIONS:
        message = _NOT_FOUND_MESSAGES.get(operation, _GENERIC_MESSAGES[operation])
        return NotFound(message, code=code, operation=operation)
    if code == FAILED_PRECONDITION and operation in _INDEX_OPERATIONS:
        return IndexMissing(_INDEX_MISSING_MESSAGE, code=code, operation=operation)
    return Unclassified(f"{_GENERIC_MESSAGES[operation]} (mã lỗi: {code})", code=code, operation=operation)
