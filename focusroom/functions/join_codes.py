# Join codes for private rooms

import secrets

# Uppercase letters and digits without the look-alikes 0, 1, I and O
JOIN_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
JOIN_CODE_LENGTH = 6


def generate_join_code(length=JOIN_CODE_LENGTH):
    # Codes are scoped to one room, so global uniqueness is not required
    return ''.join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def join_code_matches(room, supplied):
    # Case-sensitive comparison; a missing code never matches
    if not supplied or not room.join_code:
        return False
    return secrets.compare_digest(supplied.encode('utf-8'), room.join_code.encode('utf-8'))
