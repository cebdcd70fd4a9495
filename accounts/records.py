"""
Typed profile records.

Rows read from the store are converted to frozen ProfileRecord instances at
the read boundary; values outside the known domain raise RecordError so a
corrupt row is reported instead of flowing into the views.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

VERIFICATION_STATES = ('', 'no', 'yes')


class RecordError(ValueError):
    """A stored row does not satisfy the record's invariants."""


@dataclass(frozen=True)
class ProfileRecord:
    id: int
    display_name: str
    email: str
    avatar_url: str
    job_occupation: str
    is_admin: bool
    is_banned: bool
    is_verified: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileRecord':
        try:
            record_id = data['id']
        except KeyError:
            raise RecordError('profile record has no id')

        is_verified = data.get('is_verified') or ''
        if is_verified not in VERIFICATION_STATES:
            raise RecordError(f'profile {record_id} has unknown verification state {is_verified!r}')

        return cls(
            id=record_id,
            display_name=str(data.get('display_name') or ''),
            email=str(data.get('email') or ''),
            avatar_url=str(data.get('avatar_url') or ''),
            job_occupation=str(data.get('job_occupation') or ''),
            is_admin=bool(data.get('is_admin', False)),
            is_banned=bool(data.get('is_banned', False)),
            is_verified=is_verified,
            created_at=data.get('created_at'),
        )

    @classmethod
    def from_model(cls, profile) -> 'ProfileRecord':
        return cls.from_dict({
            'id': profile.pk,
            'display_name': profile.display_name,
            'email': profile.email,
            'avatar_url': profile.avatar_url,
            'job_occupation': profile.job_occupation,
            'is_admin': profile.is_admin,
            'is_banned': profile.is_banned,
            'is_verified': profile.is_verified,
            'created_at': profile.created_at,
        })

    def as_dict(self):
        return {
            'id': self.id,
            'display_name': self.display_name,
            'email': self.email,
            'avatar_url': self.avatar_url,
            'job_occupation': self.job_occupation,
            'is_admin': self.is_admin,
            'is_banned': self.is_banned,
            'is_verified': self.is_verified,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
