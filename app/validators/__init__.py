"""
app/validators package marker.
"""

from app.validators.upload_validator import UploadRules, UploadValidator, detect_pdf_type

__all__ = [
    "UploadRules",
    "UploadValidator",
    "detect_pdf_type",
]
