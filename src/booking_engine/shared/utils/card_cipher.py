import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


class CardCipher:
    """カード番号の対称暗号化（AES-256-CBC / PKCS7）

    暗号文は "<iv hex>:<ciphertext hex>" 形式。IV は暗号化ごとにランダム生成する。
    """

    KEY_LENGTH = 32
    IV_LENGTH = 16
    SEPARATOR = ":"

    def __init__(self, key: str | bytes) -> None:
        key_bytes = key.encode("utf-8") if isinstance(key, str) else key
        if len(key_bytes) != self.KEY_LENGTH:
            raise ValueError(
                f"Card encryption key must be {self.KEY_LENGTH} bytes, "
                f"got {len(key_bytes)}"
            )
        self._key = key_bytes

    def encrypt(self, plaintext: str) -> str:
        """平文を暗号化する（空文字は空文字のまま返す）"""
        if not plaintext:
            return ""

        iv = os.urandom(self.IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}{self.SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        """暗号文を復号する

        区切り文字を含まない入力は空文字を返す。
        区切りはあるが復号できない入力は ValueError を送出する。
        """
        if not token or self.SEPARATOR not in token:
            return ""

        iv_hex, _, body_hex = token.partition(self.SEPARATOR)
        iv = bytes.fromhex(iv_hex)
        body = bytes.fromhex(body_hex)
        if len(iv) != self.IV_LENGTH:
            raise ValueError("Invalid initialization vector length")

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
