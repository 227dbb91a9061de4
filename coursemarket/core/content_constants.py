# coursemarket/core/content_constants.py
"""Constants for uploaded course media"""

# Extensions accepted for course attachments and lesson multimedia (lower-case)
ALLOWED_UPLOAD_EXTENSIONS = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
    ".mp4",
    ".webm",
    ".docx",
    ".pdf",
    ".txt",
})

# Storage key prefixes
COURSE_MEDIA_PREFIX = "courses"
LESSON_MEDIA_PREFIX = "lessons"
