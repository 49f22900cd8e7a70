from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

ROLES = ("patient", "doctor")


@dataclass
class User:
    """Stored account record.

    The JSON form uses the camelCase keys the stored blobs have always used
    (`licenseNumber`, `dateOfBirth`, `resetCode`, `resetCodeExpiry`).
    `reset_code_expiry` is a Unix timestamp in milliseconds.
    """

    name: str
    email: str
    role: str
    password: Optional[str] = None
    license_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    reset_code: Optional[str] = None
    reset_code_expiry: Optional[int] = None

    _JSON_KEYS = {
        "license_number": "licenseNumber",
        "date_of_birth": "dateOfBirth",
        "reset_code": "resetCode",
        "reset_code_expiry": "resetCodeExpiry",
    }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage, omitting unset optional fields."""
        data = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            data[self._JSON_KEYS.get(key, key)] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=data.get("role", "patient"),
            password=data.get("password"),
            license_number=data.get("licenseNumber"),
            date_of_birth=data.get("dateOfBirth"),
            reset_code=data.get("resetCode"),
            reset_code_expiry=data.get("resetCodeExpiry"),
        )

    def public(self) -> "User":
        """Return a copy without the password and reset fields."""
        return User(
            name=self.name,
            email=self.email,
            role=self.role,
            license_number=self.license_number,
            date_of_birth=self.date_of_birth,
        )
