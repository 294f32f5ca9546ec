import hashlib
import bcrypt

# bcrypt only reads the first 72 bytes, so passwords are pre-hashed
def _prehash(password: str) -> bytes:
    return hashlib.sha256(password.encode("utf-8")).digest()

def hash_password(password:str) -> str:
    hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt())
    return hashed.decode()

def verify_password(password:str, hashed_password:str) -> bool:
    return bcrypt.checkpw(_prehash(password), hashed_password.encode())
