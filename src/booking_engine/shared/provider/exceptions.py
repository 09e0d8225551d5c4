class ProviderError(Exception):
    """プロバイダ API がエラー応答を返した場合

    code はプロバイダのエラーコード（例: "offer_no_longer_available"）。
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        errors: list[dict] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.errors = errors or []

    def has_code(self, *codes: str) -> bool:
        """いずれかのエラーコードを含むかどうか"""
        found = {self.code} | {e.get("code") for e in self.errors}
        return any(code in found for code in codes)


class ProviderUnavailableError(ProviderError):
    """タイムアウト・接続エラーなどで応答が得られなかった場合"""
