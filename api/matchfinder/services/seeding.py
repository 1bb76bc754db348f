from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any

from ..schemas import PartnerPreferences, Profile

FIRST_NAMES = {
    "male": ["Aarav", "Vivaan", "Arjun", "Rohan", "Kabir", "Ishaan", "Aditya", "Karan", "Manav", "Dev"],
    "female": ["Ananya", "Diya", "Isha", "Meera", "Saanvi", "Priya", "Kavya", "Nisha", "Riya", "Tara"],
}
LAST_NAMES = ["Sharma", "Patel", "Iyer", "Singh", "Reddy", "Nair", "Gupta", "Mehta", "Kaur", "Das"]
RELIGIONS = {"Hindu": 0.7, "Muslim": 0.12, "Sikh": 0.06, "Christian": 0.06, "Jain": 0.04, "Buddhist": 0.02}
MOTHER_TONGUES = ["Hindi", "Marathi", "Tamil", "Telugu", "Gujarati", "Punjabi", "Bengali", "Malayalam"]
EDUCATION = ["High School", "Graduate", "Post Graduate", "Doctorate", "Professional"]
EMPLOYMENT = ["Private Job", "Government Job", "Business", "Self Employed", "Student", "Not Working"]
OCCUPATIONS = ["Software Engineer", "Doctor", "Teacher", "Chartered Accountant", "Lawyer", "Designer"]
LOCATIONS = [
    ("Mumbai", "Maharashtra", "India"),
    ("Pune", "Maharashtra", "India"),
    ("Bengaluru", "Karnataka", "India"),
    ("Chennai", "Tamil Nadu", "India"),
    ("Delhi", "Delhi", "India"),
    ("Toronto", "Ontario", "Canada"),
    ("London", "England", "UK"),
    ("Dubai", "Dubai", "UAE"),
]
DIETS = ["veg", "non-veg", "eggetarian"]
HABITS = ["never", "occasionally", "regularly"]
MARITAL = {"never-married": 0.85, "divorced": 0.1, "widowed": 0.05}


def _weighted(rng: random.Random, weights: dict[str, float]) -> str:
    names = list(weights.keys())
    return rng.choices(names, weights=[weights[n] for n in names], k=1)[0]


def _height(rng: random.Random, gender: str) -> str:
    feet = 5 if gender == "female" or rng.random() < 0.7 else 6
    inches = rng.randint(0, 11) if feet == 5 else rng.randint(0, 3)
    style = rng.random()
    if style < 0.5:
        return f"{feet}'{inches}\""
    if style < 0.8:
        return f"{feet}.{inches}"
    return f"{round(feet * 30.48 + inches * 2.54)} cm"


def generate_profile(rng: random.Random, index: int, now: datetime, verified_ratio: float = 0.8) -> Profile:
    gender = rng.choice(["male", "female"])
    first = rng.choice(FIRST_NAMES[gender])
    last = rng.choice(LAST_NAMES)
    city, state, country = rng.choice(LOCATIONS)
    created = now - timedelta(days=rng.randint(0, 720), minutes=rng.randint(0, 1440))
    last_active = created + (now - created) * rng.random()
    photo_count = rng.choice([0, 1, 1, 2, 3])

    prefs = None
    if rng.random() < 0.6:
        prefs = PartnerPreferences(
            age_min=rng.randint(21, 28),
            age_max=rng.randint(29, 40),
            religion=[_weighted(rng, RELIGIONS)] if rng.random() < 0.5 else [],
            mother_tongue=rng.sample(MOTHER_TONGUES, k=2) if rng.random() < 0.4 else [],
            living_country=["India"] if rng.random() < 0.3 else [],
        )

    return Profile(
        id=f"u-{index:06d}",
        profile_id=f"SM{index:06d}",
        first_name=first,
        last_name=last,
        full_name=f"{first} {last}",
        age=rng.randint(21, 45),
        gender=gender,
        marital_status=_weighted(rng, MARITAL),
        religion=_weighted(rng, RELIGIONS),
        mother_tongue=rng.choice(MOTHER_TONGUES),
        location=city,
        state=state,
        country=country,
        education=rng.choice(EDUCATION),
        employment_status=rng.choice(EMPLOYMENT),
        occupation=rng.choice(OCCUPATIONS),
        salary=f"{rng.randint(3, 60)} LPA" if rng.random() < 0.8 else None,
        height=_height(rng, gender),
        diet_preference=rng.choice(DIETS),
        drinking_habit=rng.choice(HABITS),
        smoking_habit=rng.choice(HABITS),
        manglik=rng.random() < 0.3,
        has_readiness_badge=rng.random() < 0.2,
        status="verified" if rng.random() < verified_ratio else "pending",
        is_deleted=rng.random() < 0.02,
        created_at=created.isoformat(),
        last_activity_at=last_active.isoformat(),
        photos=[f"https://cdn.example.com/photos/{index}/{n}.jpg" for n in range(photo_count)],
        partner_preferences=prefs,
    )


def generate_pool(n_profiles: int = 1000, seed: int = 42, now: datetime | None = None) -> list[Profile]:
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)
    return [generate_profile(rng, i, now) for i in range(n_profiles)]


def pool_summary(profiles: list[Profile]) -> dict[str, Any]:
    return {
        "profiles": len(profiles),
        "verified": sum(1 for p in profiles if p.status == "verified"),
        "deleted": sum(1 for p in profiles if p.is_deleted),
        "male": sum(1 for p in profiles if p.gender == "male"),
        "female": sum(1 for p in profiles if p.gender == "female"),
        "with_preferences": sum(1 for p in profiles if p.partner_preferences is not None),
    }
