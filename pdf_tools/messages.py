# pdf_tools/messages.py
"""User-facing error texts, localized at the HTTP boundary."""
from typing import Optional

from . import config

CATALOG = {
    "en": {
        "no_file": "No file provided",
        "invalid_image_type": "Invalid file type. Please provide a JPEG or PNG image",
        "invalid_pdf_type": "Invalid file type. Please provide a PDF file",
        "file_too_large": "File exceeds the maximum size ({limit} MB)",
        "unsupported_format": "Format not supported: {format}",
        "timeout_document": "PDF to Word conversion took too long. Please try again with a smaller file",
        "timeout_default": "The conversion took too long. Please try again with a smaller file",
        "timeout_download": "Downloading the converted file took too long. Please try again",
        "no_file_url": "No converted file URL was received",
        "download_failed": "Failed to download converted file",
        "all_attempts_failed": "All conversion attempts failed",
        "conversion_failed": "Conversion failed",
        "unexpected": "An unexpected error occurred. Please try again",
        "not_configured": "The conversion service is not configured",
        "merge_need_two": "At least 2 PDF files are required",
        "merge_bad_file": "Failed to process file: {filename}",
        "merge_failed": "Failed to merge PDFs",
        "process_no_file": "No file uploaded",
        "process_bad_type": "Please upload a valid PDF file",
        "process_bad_options": "Invalid processing options",
        "process_timeout": "Processing the file took too long",
        "process_failed": "Failed to process the PDF file. Please try again",
    },
    "ar": {
        "no_file": "لم يتم تحميل أي ملف",
        "invalid_image_type": "نوع الملف غير صالح. يرجى تحميل صورة JPEG أو PNG",
        "invalid_pdf_type": "نوع الملف غير صالح. يرجى تحميل ملف PDF",
        "file_too_large": "حجم الملف يتجاوز الحد الأقصى ({limit} ميجابايت)",
        "unsupported_format": "الصيغة غير مدعومة: {format}",
        "timeout_document": "عملية تحويل PDF إلى Word استغرقت وقتاً طويلاً. يرجى المحاولة مع ملف أصغر حجماً",
        "timeout_default": "عملية التحويل استغرقت وقتاً طويلاً. يرجى المحاولة مرة أخرى بملف أصغر حجماً",
        "timeout_download": "تنزيل الملف المحول استغرق وقتاً طويلاً. يرجى المحاولة مرة أخرى",
        "no_file_url": "لم يتم استلام رابط الملف المحول",
        "download_failed": "فشل تنزيل الملف المحول",
        "all_attempts_failed": "فشلت جميع محاولات التحويل",
        "conversion_failed": "فشل التحويل",
        "unexpected": "حدث خطأ غير متوقع. الرجاء المحاولة مرة أخرى",
        "not_configured": "خدمة التحويل غير مهيأة",
        "merge_need_two": "يجب تحميل ملفين PDF على الأقل",
        "merge_bad_file": "فشل في معالجة الملف: {filename}",
        "merge_failed": "فشل دمج ملفات PDF",
        "process_no_file": "لم يتم تحميل أي ملف",
        "process_bad_type": "يرجى تحميل ملف PDF صحيح",
        "process_bad_options": "خيارات المعالجة غير صالحة",
        "process_timeout": "معالجة الملف استغرقت وقتاً طويلاً",
        "process_failed": "فشلت معالجة ملف PDF. يرجى المحاولة مرة أخرى",
    },
}


def message(key: str, locale: Optional[str] = None, **params) -> str:
    table = CATALOG.get(locale or config.APP_LOCALE, CATALOG["en"])
    text = table.get(key) or CATALOG["en"][key]
    return text.format(**params) if params else text
