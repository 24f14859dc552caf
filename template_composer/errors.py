"""
Error handling for Template Composer.

Provides specific exception types for the failure modes that reach the
caller, with details and suggestions for debugging and user feedback.
Expected absence (no template, no product image, empty labels) is never
an error.
"""

from typing import Dict, List, Any


class TemplateComposerError(Exception):
    """Base exception for all Template Composer errors."""

    status_code = 500

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(TemplateComposerError):
    """Raised when user input validation fails."""
    status_code = 400


class ConfigurationError(TemplateComposerError):
    """Raised when configuration is invalid or missing."""
    pass


class ProcessingError(TemplateComposerError):
    """Raised when the render pipeline fails."""
    pass


class ExportError(ProcessingError):
    """Raised when encoding or writing the finished raster fails."""

    def __init__(self, message: str, target: str = None, details: Dict[str, Any] = None):
        details = dict(details or {})
        if target is not None:
            details['target'] = target
        super().__init__(
            message,
            details=details,
            suggestions=[
                "Check that the output folder exists and is writable",
                "Ensure there is enough free disk space",
                "Render again once the problem is fixed"
            ]
        )


class FileTooLargeError(ValidationError):
    """Raised when an uploaded image exceeds the size limit."""
    status_code = 413

    def __init__(self, filename: str, size_mb: float, limit_mb: float):
        super().__init__(
            f"File too large: {filename} ({size_mb:.1f}MB exceeds {limit_mb:.1f}MB limit)",
            details={
                'filename': filename,
                'size_mb': size_mb,
                'limit_mb': limit_mb
            },
            suggestions=[
                f"Reduce file size to under {limit_mb:.1f}MB",
                "Compress the image using image editing software",
                "Export the image at a lower resolution"
            ]
        )


def create_error_recovery_suggestions(error: Exception, context: Dict[str, Any] = None) -> List[str]:
    """Generate contextual recovery suggestions for any error."""
    suggestions = []

    if isinstance(error, TemplateComposerError):
        suggestions.extend(error.suggestions)

    if context:
        if context.get('undecodable_images'):
            suggestions.append("Re-export the unreadable images as PNG or JPEG")

        if context.get('missing_font'):
            suggestions.append("Install a serif font or set FONT_PATH to a .ttf file")

    if not suggestions:
        suggestions = [
            "Check the layout values and try again",
            "Try a different template or product image",
            "Contact support if the problem persists"
        ]

    return suggestions
