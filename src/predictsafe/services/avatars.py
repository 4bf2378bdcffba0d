import random
from typing import Optional, Sequence

from fastapi import HTTPException

AVATAR_FILES = (
    "bear.png",
    "chicken.png",
    "dog (1).png",
    "dog.png",
    "jaguar.png",
    "rabbit.png",
    "sea-lion.png",
)


def random_avatar(files: Sequence[str] = AVATAR_FILES, rng: Optional[random.Random] = None) -> str:
    """Public path of a randomly chosen avatar image."""
    if not files:
        raise HTTPException(status_code=404, detail="No avatars available")
    return f"/avatars/{(rng or random).choice(list(files))}"
