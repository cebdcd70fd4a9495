"""
Transient user-visible notices.

Services return Notice objects; views hand them to the Django messages
framework so they show once on the next rendered page.
"""

from dataclasses import dataclass

from django.contrib import messages

_LEVELS = {
    'success': messages.SUCCESS,
    'info': messages.INFO,
    'warning': messages.WARNING,
    'error': messages.ERROR,
}


@dataclass(frozen=True)
class Notice:
    level: str
    text: str

    @classmethod
    def success(cls, text):
        return cls('success', text)

    @classmethod
    def error(cls, text):
        return cls('error', text)

    @classmethod
    def info(cls, text):
        return cls('info', text)

    @classmethod
    def warning(cls, text):
        return cls('warning', text)

    def as_dict(self):
        return {'level': self.level, 'text': self.text}


def flash(request, *notices):
    """Queue notices on the request's message storage."""
    for notice in notices:
        if notice is None:
            continue
        messages.add_message(request, _LEVELS.get(notice.level, messages.INFO), notice.text)
