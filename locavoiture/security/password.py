"""
Empreinte des mots de passe des comptes employés / clients.

SHA-256 hexadécimal, sans sel ni itérations : c'est le format déjà stocké
dans les collections `employees` et `utilisateurs`. Faible, conservé tel quel.
"""

import hashlib
import hmac


def digest_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, digest: str) -> bool:
    return hmac.compare_digest(digest_password(password), str(digest or ""))
