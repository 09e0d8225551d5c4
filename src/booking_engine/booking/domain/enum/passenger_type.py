from enum import Enum


class PassengerType(str, Enum):
    """搭乗者区分（年齢は予約時点で判定）"""

    ADULT = "adult"
    CHILD = "child"
    INFANT = "infant"

    @property
    def provider_type(self) -> str:
        """プロバイダ API 上の区分名"""
        if self is PassengerType.INFANT:
            return "infant_without_seat"
        return self.value


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def provider_code(self) -> str:
        return "m" if self is Gender.MALE else "f"
