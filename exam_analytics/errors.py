from __future__ import annotations

class ImportDataError(Exception):
    """Structural import failure: the whole import attempt is aborted and the user must pick another file."""

    message = "تعذر قراءة الملف. تأكد من استخدام التنسيق الصحيح."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class EmptyFileError(ImportDataError):
    message = "الملف فارغ (the file is empty). اختر ملفاً آخر يحتوي على بيانات."


class NoValidDataError(ImportDataError):
    message = (
        "لم يتم العثور على بيانات صالحة (no valid data found). "
        "تأكد من وجود عمود لاسم الطالب أو رقمه وأعمدة للدرجات."
    )
