"""
Backend d'authentification par token JWT.

Garde l'access token de la session courante ; `current_user()` le décode
(signature + expiration). Token absent, expiré ou mal signé = aucun utilisateur.
"""

from typing import Optional

from jose import JWTError

from locavoiture.backend.interfaces import AuthUser
from locavoiture.security.tokens import JWTSettings, TokenPair, decode_token, mint_token_pair


class TokenAuthBackend:
    def __init__(self, jwt_settings: JWTSettings, *, access_token: Optional[str] = None):
        self.jwt = jwt_settings
        self._access_token = access_token

    @classmethod
    def from_access_token(cls, jwt_settings: JWTSettings, access_token: Optional[str]) -> "TokenAuthBackend":
        """Vue "par requête" : l'utilisateur courant est celui du bearer reçu."""
        return cls(jwt_settings, access_token=access_token)

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    def current_user(self) -> Optional[AuthUser]:
        if not self._access_token:
            return None
        try:
            decoded = decode_token(self._access_token, self.jwt)
        except JWTError:
            return None
        uid = decoded.get("sub")
        if not uid:
            return None
        return AuthUser(uid=uid, email=decoded.get("email"), display_name=decoded.get("name"))

    def sign_in(self, *, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> TokenPair:
        pair = mint_token_pair(uid=uid, email=email, display_name=display_name, settings=self.jwt)
        self._access_token = pair["access_token"]
        return pair

    def sign_out(self) -> None:
        self._access_token = None
