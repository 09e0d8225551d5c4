from dataclasses import dataclass

from booking_engine.shared.utils.validators import is_valid_email


@dataclass(frozen=True)
class Contact:
    """予約の連絡先（メールアドレスは小文字で保持）"""

    email: str
    phone: str

    def __post_init__(self) -> None:
        normalized = self.email.strip().lower()
        if not is_valid_email(normalized):
            raise ValueError(f"Invalid email address: {self.email}")
        object.__setattr__(self, "email", normalized)
        object.__setattr__(self, "phone", self.phone.strip())
